# inventario/tests/utils.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from productos.models import Producto, UnidadMedida
from inventario.models import Movimiento


def unidad(simbolo: str = "UND", permite_decimales: bool = False) -> UnidadMedida:
    obj, _ = UnidadMedida.objects.get_or_create(
        simbolo=simbolo,
        defaults={"nombre": simbolo, "permite_decimales": permite_decimales},
    )
    return obj


def crear_producto(
    pk: str,
    *,
    stock: str = "0",
    stock_minimo: str = "0",
    precio: str = "0",
    activo: bool = True,
    nombre: Optional[str] = None,
    sku: Optional[str] = None,
    unidad_medida: Optional[UnidadMedida] = None,
) -> Producto:
    return Producto.objects.create(
        id=pk,
        nombre=nombre or f"Producto {pk}",
        sku=sku,
        stock=Decimal(stock),
        stock_minimo=Decimal(stock_minimo),
        precio=Decimal(precio),
        activo=activo,
        unidad_medida=unidad_medida or unidad(),
    )


def movimiento_directo(
    producto_id: str,
    tipo: str,
    cantidad: str,
    anterior: str,
    nueva: str,
    *,
    nombre: str = "",
    sku: str = "",
) -> Movimiento:
    """Inserta en el libro sin pasar por append_movement (datos heredados / drift)."""
    return Movimiento.objects.create(
        producto_id=producto_id,
        tipo=tipo,
        cantidad=Decimal(cantidad),
        cantidad_anterior=Decimal(anterior),
        cantidad_nueva=Decimal(nueva),
        producto_nombre=nombre,
        producto_sku=sku,
    )
