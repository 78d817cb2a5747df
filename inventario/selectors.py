# inventario/selectors.py
# -*- coding: utf-8 -*-
"""
Lecturas del libro de movimientos y del catálogo (sin efectos secundarios).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional

from django.apps import apps
from django.db.models import (
    Case,
    Count,
    DecimalField,
    ExpressionWrapper,
    F,
    OuterRef,
    Q,
    QuerySet,
    Subquery,
    Sum,
    Value,
    When,
)
from django.db.models.functions import Coalesce

from .conf import PRODUCT_MODEL
from .filters import MovimientoFilter
from .models import Movimiento

_CENT = Decimal("0.01")
_DECIMAL = DecimalField(max_digits=18, decimal_places=2)


# ======================================================================================
# Helpers
# ======================================================================================


def _product_model():
    """Obtiene el modelo real de Producto según configuración swappeable."""
    return apps.get_model(PRODUCT_MODEL)


def _q2(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def display_name(user) -> str:
    """Nombre visible del actor de un movimiento ('' si no hay usuario)."""
    if user is None:
        return ""
    full = (user.get_full_name() or "").strip() if hasattr(user, "get_full_name") else ""
    return full or getattr(user, "username", "") or ""


def delta_expression():
    """Delta con signo de un movimiento, como expresión de base de datos."""
    return Case(
        When(tipo=Movimiento.TIPO_ENTRADA, then=F("cantidad")),
        When(tipo=Movimiento.TIPO_SALIDA, then=F("cantidad") * Value(Decimal("-1"))),
        default=F("cantidad"),
        output_field=_DECIMAL,
    )


# ======================================================================================
# Libro de movimientos
# ======================================================================================


def list_movements(params: Mapping[str, Any] | None = None) -> QuerySet[Movimiento]:
    """
    Movimientos en orden cronológico inverso (created_at, id), con el nombre y
    SKU actuales del producto anotados por subconsulta. Un movimiento huérfano
    sigue apareciendo: `nombre_actual`/`sku_actual` quedan en NULL y se usa la
    foto tomada al registrar.

    Filtros (ver MovimientoFilter): producto, tipo, desde, hasta, q.
    """
    Producto = _product_model()
    productos = Producto.objects.filter(pk=OuterRef("producto_id"))

    qs = Movimiento.objects.select_related("usuario").annotate(
        nombre_actual=Subquery(productos.values("nombre")[:1]),
        sku_actual=Subquery(productos.values("sku")[:1]),
    )
    if params:
        qs = MovimientoFilter(params, queryset=qs).qs
    return qs.order_by("-created_at", "-id")


def distinct_product_ids() -> set[str]:
    """Ids de producto referenciados por al menos un movimiento."""
    return set(
        Movimiento.objects.order_by()
        .values_list("producto_id", flat=True)
        .distinct()
    )


def movements_count_by_product(ids: Iterable[str]) -> dict[str, int]:
    rows = (
        Movimiento.objects.filter(producto_id__in=list(ids))
        .order_by()
        .values("producto_id")
        .annotate(total=Count("id"))
    )
    return {r["producto_id"]: r["total"] for r in rows}


def ledger_balance(producto_id: str) -> Decimal:
    """Suma con signo de los deltas del producto (0 si no tiene movimientos)."""
    total = (
        Movimiento.objects.filter(producto_id=str(producto_id))
        .aggregate(total=Sum(delta_expression()))
        .get("total")
    )
    return _q2(total)


def ultimo_movimiento(producto_id: str) -> Optional[Movimiento]:
    return (
        Movimiento.objects.filter(producto_id=str(producto_id))
        .order_by("-created_at", "-id")
        .first()
    )


def ultima_foto(producto_id: str) -> tuple[str, str]:
    """(nombre, sku) de la foto más reciente no vacía en los movimientos del id."""
    base = Movimiento.objects.filter(producto_id=str(producto_id)).order_by("-created_at", "-id")
    nombre = base.exclude(producto_nombre="").values_list("producto_nombre", flat=True).first() or ""
    sku = base.exclude(producto_sku="").values_list("producto_sku", flat=True).first() or ""
    return nombre.strip(), sku.strip()


def productos_con_saldo_distinto() -> list[str]:
    """
    Ids de productos cuyo stock en catálogo difiere del saldo del último
    movimiento (cantidad_nueva).
    """
    Producto = _product_model()
    ultimo = (
        Movimiento.objects.filter(producto_id=OuterRef("pk"))
        .order_by("-created_at", "-id")
        .values("cantidad_nueva")[:1]
    )
    rows = (
        Producto.objects.annotate(ultimo_saldo=Subquery(ultimo, output_field=_DECIMAL))
        .filter(ultimo_saldo__isnull=False)
        .values_list("pk", "stock", "ultimo_saldo")
    )
    return sorted(str(pk) for pk, stock, saldo in rows if _q2(stock) != _q2(saldo))


def cantidades_con_signo_invalido() -> int:
    """ENTRADA/SALIDA con cantidad <= 0 o AJUSTE en cero."""
    return Movimiento.objects.filter(
        Q(tipo__in=[Movimiento.TIPO_ENTRADA, Movimiento.TIPO_SALIDA], cantidad__lte=0)
        | Q(tipo=Movimiento.TIPO_AJUSTE, cantidad=0)
    ).count()


@dataclass
class RecorridoLibro:
    discontinuidades: list[str] = field(default_factory=list)
    saldos_incoherentes: int = 0


def recorrer_libro() -> RecorridoLibro:
    """
    Recorre el libro por (producto_id, created_at, id) y reporta:
      - ids donde cantidad_nueva[n] != cantidad_anterior[n+1]
      - movimientos donde cantidad_nueva != cantidad_anterior + delta
    """
    out = RecorridoLibro()
    rotos: set[str] = set()
    previo_id: Optional[str] = None
    previo_saldo: Optional[Decimal] = None

    rows = (
        Movimiento.objects.order_by("producto_id", "created_at", "id")
        .values_list("producto_id", "tipo", "cantidad", "cantidad_anterior", "cantidad_nueva")
        .iterator(chunk_size=2000)
    )
    for pid, tipo, cantidad, anterior, nueva in rows:
        cantidad, anterior, nueva = _q2(cantidad), _q2(anterior), _q2(nueva)
        if tipo == Movimiento.TIPO_ENTRADA:
            delta = abs(cantidad)
        elif tipo == Movimiento.TIPO_SALIDA:
            delta = -abs(cantidad)
        else:
            delta = cantidad
        if anterior + delta != nueva:
            out.saldos_incoherentes += 1

        if pid == previo_id and previo_saldo is not None and previo_saldo != anterior:
            rotos.add(pid)
        previo_id, previo_saldo = pid, nueva

    out.discontinuidades = sorted(rotos)
    return out


# ======================================================================================
# Catálogo (para la vista de inventario)
# ======================================================================================


def productos_para_inventario() -> QuerySet:
    """Productos activos ordenados por nombre, con categoría y unidad."""
    Producto = _product_model()
    return (
        Producto.objects.filter(activo=True)
        .select_related("categoria", "unidad_medida")
        .order_by("nombre", "pk")
    )


def estadisticas_inventario() -> dict[str, Any]:
    """Totales sobre productos activos, calculados con agregados en la base de datos."""
    Producto = _product_model()
    valor = ExpressionWrapper(F("stock") * F("precio"), output_field=_DECIMAL)
    agg = Producto.objects.filter(activo=True).aggregate(
        totalProductos=Count("pk"),
        productosSinStock=Count("pk", filter=Q(stock__lte=0)),
        productosStockBajo=Count("pk", filter=Q(stock__gt=0, stock__lte=F("stock_minimo"))),
        productosNormales=Count("pk", filter=Q(stock__gt=0) & Q(stock__gt=F("stock_minimo"))),
        valorTotalInventario=Coalesce(Sum(valor), Value(Decimal("0")), output_field=_DECIMAL),
    )
    agg["valorTotalInventario"] = _q2(agg["valorTotalInventario"])
    return agg


__all__ = [
    "display_name",
    "delta_expression",
    "list_movements",
    "distinct_product_ids",
    "movements_count_by_product",
    "ledger_balance",
    "ultimo_movimiento",
    "ultima_foto",
    "productos_con_saldo_distinto",
    "cantidades_con_signo_invalido",
    "recorrer_libro",
    "productos_para_inventario",
    "estadisticas_inventario",
]
