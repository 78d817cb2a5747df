# inventario/pagination.py
# -*- coding: utf-8 -*-
"""
Paginación del libro de movimientos.

- MovimientoPagination: por defecto 50 filas (el listado histórico mostraba
  los últimos 50 movimientos), ajustable con ?page_size= hasta 500.
"""
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination


class _SafePageNumberPagination(PageNumberPagination):
    """
    ?page_size=0, negativo o no numérico -> page_size por defecto.
    Respeta max_page_size.
    """
    def get_page_size(self, request):
        raw = request.query_params.get(self.page_size_query_param)
        if raw is None:
            return self.page_size
        try:
            value = int(raw)
        except (TypeError, ValueError):
            return self.page_size
        if value <= 0:
            return self.page_size
        if getattr(self, "max_page_size", None):
            return min(value, self.max_page_size)
        return value


class MovimientoPagination(_SafePageNumberPagination):
    page_size = 50
    page_query_param = "page"
    page_size_query_param = "page_size"
    max_page_size = 500


class RemediacionPagination(_SafePageNumberPagination):
    page_size = 20
    page_query_param = "page"
    page_size_query_param = "page_size"
    max_page_size = 200


__all__ = ["MovimientoPagination", "RemediacionPagination"]
