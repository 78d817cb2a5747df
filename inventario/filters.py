# inventario/filters.py
# -*- coding: utf-8 -*-
"""
Filtros django-filter para el libro de movimientos.
"""
from __future__ import annotations

import django_filters
from django.db.models import Q, QuerySet

from .models import Movimiento


class MovimientoFilter(django_filters.FilterSet):
    """
    Parámetros:
      - producto: id exacto del producto (también ids huérfanos)
      - tipo: ENTRADA | SALIDA | AJUSTE (no sensible a mayúsculas)
      - desde / hasta: fecha (YYYY-MM-DD), inclusivas
      - q: texto en nombre/sku (actual o foto), motivo o número de guía
    """
    producto = django_filters.CharFilter(field_name="producto_id", lookup_expr="exact")
    tipo = django_filters.CharFilter(method="filter_tipo")
    desde = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    hasta = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    q = django_filters.CharFilter(method="filter_q")

    class Meta:
        model = Movimiento
        fields = ["producto", "tipo", "desde", "hasta", "q"]

    def filter_tipo(self, qs: QuerySet, name: str, value: str) -> QuerySet:
        value = (value or "").strip().upper()
        if not value:
            return qs
        return qs.filter(tipo=value)

    def filter_q(self, qs: QuerySet, name: str, value: str) -> QuerySet:
        value = (value or "").strip()
        if not value:
            return qs
        cond = (
            Q(producto_nombre__icontains=value)
            | Q(producto_sku__icontains=value)
            | Q(motivo__icontains=value)
            | Q(numero_guia__icontains=value)
            | Q(producto_id__iexact=value)
        )
        # Las anotaciones del selector (nombre/sku actuales) también participan
        if "nombre_actual" in qs.query.annotations:
            cond |= Q(nombre_actual__icontains=value) | Q(sku_actual__icontains=value)
        return qs.filter(cond)


__all__ = ["MovimientoFilter"]
