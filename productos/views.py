# productos/views.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Optional

from django.db.models import ProtectedError, Q
from rest_framework import filters, permissions, status, viewsets
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import JSONParser
from rest_framework.response import Response

from .models import Categoria, Producto, UnidadMedida
from .serializers import CategoriaSerializer, ProductoSerializer, UnidadMedidaSerializer

logger = logging.getLogger(__name__)


# =========================
# Permisos / Paginación
# =========================

class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Lectura: cualquier autenticado (GET, HEAD, OPTIONS).
    Escritura: sólo admin (is_staff o is_superuser).
    """
    def has_permission(self, request, view):
        u = request.user
        if not (u and u.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(u.is_staff or u.is_superuser)


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 200


# =========================
# Helpers de parseo seguro
# =========================

TRUE_SET = {"1", "true", "t", "yes", "si", "sí", "y"}
FALSE_SET = {"0", "false", "f", "no", "n"}


def _parse_bool(val: Optional[str]) -> Optional[bool]:
    if val is None:
        return None
    low = val.strip().lower()
    if low in TRUE_SET:
        return True
    if low in FALSE_SET:
        return False
    return None


def _parse_int(val: Optional[str]) -> Optional[int]:
    try:
        return int(val) if val is not None and str(val).strip() != "" else None
    except (TypeError, ValueError):
        return None


# =========================
# ViewSets de Catálogos
# =========================

class CategoriaViewSet(viewsets.ModelViewSet):
    queryset = Categoria.objects.all().order_by("nombre")
    serializer_class = CategoriaSerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = DefaultPagination
    parser_classes = [JSONParser]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["nombre"]
    ordering_fields = ["nombre", "created_at"]
    ordering = ["nombre"]


class UnidadMedidaViewSet(viewsets.ModelViewSet):
    queryset = UnidadMedida.objects.all().order_by("nombre")
    serializer_class = UnidadMedidaSerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = DefaultPagination
    parser_classes = [JSONParser]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["nombre", "simbolo"]
    ordering = ["nombre"]


# =========================
# Productos
# =========================

class ProductoViewSet(viewsets.ModelViewSet):
    """
    CRUD de productos del catálogo.

    - No-admins ven sólo activos.
    - DELETE se rechaza (409) mientras el producto tenga movimientos de inventario;
      en ese caso debe desactivarse (activo=false).
    """
    queryset = Producto.objects.select_related("categoria", "unidad_medida").all()
    serializer_class = ProductoSerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = DefaultPagination
    parser_classes = [JSONParser]

    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["sku", "nombre", "descripcion", "categoria__nombre"]
    ordering_fields = ["nombre", "sku", "precio", "stock", "created_at", "updated_at"]
    ordering = ["nombre"]

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params
        user = getattr(self.request, "user", None)

        is_admin = bool(user and (user.is_staff or user.is_superuser))
        if not is_admin:
            qs = qs.filter(activo=True)

        categoria_id = _parse_int(params.get("categoria"))
        if categoria_id is not None:
            qs = qs.filter(categoria_id=categoria_id)

        sku = (params.get("sku") or "").strip()
        if sku:
            qs = qs.filter(sku__iexact=sku)

        if "requiere_revision" in params:
            val = _parse_bool(params.get("requiere_revision"))
            if val is not None:
                qs = qs.filter(requiere_revision=val)

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(sku__icontains=q)
                | Q(nombre__icontains=q)
                | Q(descripcion__icontains=q)
                | Q(categoria__nombre__icontains=q)
            )

        if is_admin and "activo" in params:
            val = _parse_bool(params.get("activo"))
            if val is not None:
                qs = qs.filter(activo=val)

        return qs

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            instance.delete()
        except ProtectedError as e:
            logger.warning("Eliminación de producto %s rechazada: %s", instance.pk, e)
            return Response(
                {"detail": str(e.args[0]) if e.args else "Producto referenciado."},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)
