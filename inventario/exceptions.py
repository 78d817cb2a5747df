# inventario/exceptions.py
# -*- coding: utf-8 -*-
"""
Errores del núcleo de inventario (libro de movimientos + sincronización).

Las vistas traducen cada uno a su respuesta HTTP:
    StoreUnavailable          -> 503
    InvalidOperatorInput      -> 400
    RemediationPartialFailure -> 207
    ProductoReferenciado      -> 409
"""
from __future__ import annotations

from django.db.models import ProtectedError


class InventarioError(Exception):
    """Base de los errores del módulo de inventario."""


class StoreUnavailable(InventarioError):
    """El catálogo o el libro de movimientos no se pudo leer/escribir."""


class InvalidOperatorInput(InventarioError):
    """Acción desconocida, confirmación ausente o lista de objetivos vacía."""


class RemediationPartialFailure(InventarioError):
    """Algunos ids no quedaron resueltos tras una remediación."""

    def __init__(self, message: str, resultado=None):
        super().__init__(message)
        self.resultado = resultado


class ProductoReferenciado(ProtectedError):
    """Se intentó eliminar un producto que aún tiene movimientos."""

    def __init__(self, producto_id: str, total: int):
        self.producto_id = producto_id
        self.total = total
        super().__init__(
            f"No se puede eliminar el producto {producto_id}: tiene {total} movimiento(s) de inventario.",
            set(),
        )
