# inventario/services.py
# -*- coding: utf-8 -*-
"""
Escrituras del libro de movimientos y proyección de estado de stock.

- append_movement: única vía para mover el stock del catálogo. En una sola
  transacción bloquea la fila del producto, valida, inserta el movimiento con
  saldos anterior/nuevo y actualiza `Producto.stock`.
- clasificar_estado / proyectar_producto: proyección pura (sin E/S).
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Tuple

from django.apps import apps
from django.db import models, transaction
from rest_framework.exceptions import NotFound, ValidationError

from .conf import PRODUCT_MODEL
from .models import Movimiento

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")

TIPOS_VALIDOS = {Movimiento.TIPO_ENTRADA, Movimiento.TIPO_SALIDA, Movimiento.TIPO_AJUSTE}


# ======================================================================================
# Proyección de stock
# ======================================================================================


class EstadoStock(models.TextChoices):
    AGOTADO = "Agotado", "Agotado"
    STOCK_BAJO = "Stock Bajo", "Stock Bajo"
    NORMAL = "Normal", "Normal"


def _to_decimal(value) -> Decimal:
    """Convierte a Decimal de forma segura. None o inválidos -> 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def clasificar_estado(stock, stock_minimo) -> EstadoStock:
    """
    stock <= 0               -> Agotado
    0 < stock <= minimo      -> Stock Bajo
    stock > minimo           -> Normal
    """
    s = _to_decimal(stock)
    m = _to_decimal(stock_minimo)
    if s <= 0:
        return EstadoStock.AGOTADO
    if s <= m:
        return EstadoStock.STOCK_BAJO
    return EstadoStock.NORMAL


def valor_stock(stock, precio) -> Decimal:
    return (_to_decimal(stock) * _to_decimal(precio)).quantize(_CENT, rounding=ROUND_HALF_UP)


def proyectar_producto(producto) -> dict[str, Any]:
    """Fila de catálogo + estado + valorStock, lista para la vista de inventario."""
    categoria = getattr(producto, "categoria", None)
    unidad = getattr(producto, "unidad_medida", None)
    return {
        "id": str(producto.pk),
        "sku": producto.sku or "",
        "nombre": producto.nombre,
        "descripcion": getattr(producto, "descripcion", "") or "",
        "stock": _to_decimal(producto.stock),
        "stockMinimo": _to_decimal(producto.stock_minimo),
        "precio": _to_decimal(producto.precio),
        "activo": bool(producto.activo),
        "requiereRevision": bool(getattr(producto, "requiere_revision", False)),
        "categoria": {"id": categoria.pk, "nombre": categoria.nombre} if categoria else None,
        "unidadMedida": (
            {"id": unidad.pk, "nombre": unidad.nombre, "simbolo": unidad.simbolo} if unidad else None
        ),
        "estado": clasificar_estado(producto.stock, producto.stock_minimo).value,
        "valorStock": valor_stock(producto.stock, producto.precio),
    }


# ======================================================================================
# Libro de movimientos (escritura)
# ======================================================================================


def _parse_cantidad(raw) -> Decimal:
    if raw is None or raw == "":
        raise ValidationError({"cantidad": "La cantidad es requerida."})
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationError({"cantidad": "Cantidad inválida."})
    if not value.is_finite():
        raise ValidationError({"cantidad": "Cantidad inválida."})
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def _delta(tipo: str, cantidad: Decimal) -> Decimal:
    if tipo == Movimiento.TIPO_ENTRADA:
        return cantidad
    if tipo == Movimiento.TIPO_SALIDA:
        return -cantidad
    return cantidad


@transaction.atomic
def append_movement(
    *,
    producto_id: str,
    tipo: str,
    cantidad,
    usuario=None,
    motivo: str = "",
    numero_guia: Optional[str] = None,
) -> Tuple[Movimiento, Optional[str]]:
    """
    Registra un movimiento y actualiza el stock del producto.
    Retorna (movimiento, advertencia|None).

    Reglas:
      - ENTRADA/SALIDA: cantidad > 0 (magnitud). AJUSTE: cantidad != 0 (con signo).
      - Producto existente y activo.
      - Sin decimales si la unidad no los permite.
      - El saldo resultante nunca queda bajo cero ("Stock insuficiente").
    """
    tipo = (tipo or "").strip().upper()
    if tipo not in TIPOS_VALIDOS:
        raise ValidationError({"tipo": "Tipo inválido. Use ENTRADA, SALIDA o AJUSTE."})

    qty = _parse_cantidad(cantidad)
    if tipo in (Movimiento.TIPO_ENTRADA, Movimiento.TIPO_SALIDA) and qty <= 0:
        raise ValidationError({"cantidad": "La cantidad debe ser mayor a 0."})
    if tipo == Movimiento.TIPO_AJUSTE and qty == 0:
        raise ValidationError({"cantidad": "El ajuste no puede ser 0."})

    Producto = apps.get_model(PRODUCT_MODEL)
    producto = (
        Producto.objects.select_for_update()
        .select_related("unidad_medida")
        .filter(pk=str(producto_id or ""))
        .first()
    )
    if producto is None:
        raise NotFound("Producto no encontrado")
    if not producto.activo:
        raise ValidationError({"productoId": "El producto está inactivo."})

    unidad = getattr(producto, "unidad_medida", None)
    if unidad is not None and not unidad.permite_decimales and qty != qty.to_integral_value():
        raise ValidationError({"cantidad": f"La unidad '{unidad.simbolo}' no admite decimales."})

    anterior = _to_decimal(producto.stock).quantize(_CENT)
    nuevo = (anterior + _delta(tipo, qty)).quantize(_CENT)
    if nuevo < 0:
        raise ValidationError({"cantidad": f"Stock insuficiente. Disponible: {anterior}"})

    mov = Movimiento.objects.create(
        tipo=tipo,
        producto_id=str(producto.pk),
        producto_nombre=(producto.nombre or "")[:200],
        producto_sku=(producto.sku or "")[:50],
        cantidad=qty,
        cantidad_anterior=anterior,
        cantidad_nueva=nuevo,
        usuario=usuario if getattr(usuario, "is_authenticated", False) else None,
        motivo=motivo or "",
        numero_guia=(numero_guia or None),
    )

    producto.stock = nuevo
    producto.save(update_fields=["stock", "updated_at"])

    warning = None
    if nuevo < _to_decimal(producto.stock_minimo):
        warning = "El nuevo stock queda por debajo del mínimo"

    logger.info(
        "Movimiento de inventario #%s creado: producto=%s tipo=%s cantidad=%s saldo=%s->%s",
        mov.pk,
        mov.producto_id,
        tipo,
        qty,
        anterior,
        nuevo,
    )
    return mov, warning


def delete_movements(ids: Iterable[int]) -> int:
    """Elimina movimientos por id. Retorna la cantidad eliminada."""
    ids = [int(i) for i in ids]
    if not ids:
        return 0
    deleted, _ = Movimiento.objects.filter(pk__in=ids).delete()
    return deleted


__all__ = [
    "EstadoStock",
    "clasificar_estado",
    "valor_stock",
    "proyectar_producto",
    "append_movement",
    "delete_movements",
]
