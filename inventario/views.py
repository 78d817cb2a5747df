# inventario/views.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Callable

from django.db import DatabaseError
from django.utils.cache import patch_cache_control
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import InvalidOperatorInput, StoreUnavailable
from .models import Remediacion
from .pagination import MovimientoPagination, RemediacionPagination
from .permissions import CanRegisterMovements, IsInventoryAdmin
from .remediation import ejecutar_remediacion
from .selectors import estadisticas_inventario, list_movements, productos_para_inventario
from .serializers import (
    MovimientoCreateSerializer,
    MovimientoSerializer,
    RemediacionSerializer,
    SyncActionSerializer,
)
from .services import append_movement, proyectar_producto
from .sync import validar_sincronizacion

logger = logging.getLogger(__name__)

# Estado de la remediación -> código HTTP
_HTTP_POR_ESTADO = {
    Remediacion.ESTADO_COMPLETADA: status.HTTP_200_OK,
    Remediacion.ESTADO_PARCIAL: status.HTTP_207_MULTI_STATUS,
    Remediacion.ESTADO_FALLIDA: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _cache(response: Response, s_maxage: int, swr: int) -> Response:
    patch_cache_control(response, public=True, s_maxage=s_maxage, stale_while_revalidate=swr)
    return response


def _reporte_response(report) -> Response:
    if report.store_unavailable:
        return Response(
            {"success": False, "error": "Almacén no disponible", "syncValidation": report.as_dict()},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response({"success": True, "syncValidation": report.as_dict()})


# ======================================================================================
# /api/inventario/
# ======================================================================================


class InventarioView(APIView):
    """
    GET ?action=productos|movimientos|sync-validation|estadisticas
    POST {productoId, tipo, cantidad, motivo?, numeroGuia?} -> registra un movimiento.
    """
    permission_classes = [CanRegisterMovements]

    def get(self, request: Request) -> Response:
        action = (request.query_params.get("action") or "productos").strip().lower()
        handlers: dict[str, Callable[[Request], Response]] = {
            "productos": self._productos,
            "movimientos": self._movimientos,
            "sync-validation": self._sync_validation,
            "estadisticas": self._estadisticas,
        }
        handler = handlers.get(action)
        if handler is None:
            return Response({"success": False, "detail": "Acción no válida"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            return handler(request)
        except DatabaseError as e:
            logger.exception("Inventario GET action=%s: almacén no disponible", action)
            return Response(
                {"success": False, "detail": f"Almacén no disponible: {e}"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

    def _productos(self, request: Request) -> Response:
        productos = [proyectar_producto(p) for p in productos_para_inventario()]
        data = {
            "success": True,
            "message": f"{len(productos)} productos encontrados",
            "productos": productos,
        }
        return _cache(Response(data), 30, 300)

    def _movimientos(self, request: Request) -> Response:
        qs = list_movements(request.query_params)
        paginator = MovimientoPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        ser = MovimientoSerializer(page, many=True)
        return _cache(paginator.get_paginated_response(ser.data), 20, 120)

    def _sync_validation(self, request: Request) -> Response:
        resp = _reporte_response(validar_sincronizacion())
        if resp.status_code == status.HTTP_200_OK:
            _cache(resp, 20, 120)
        return resp

    def _estadisticas(self, request: Request) -> Response:
        return _cache(Response({"success": True, "estadisticas": estadisticas_inventario()}), 60, 600)

    def post(self, request: Request) -> Response:
        ser = MovimientoCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        try:
            mov, warning = append_movement(
                producto_id=data["productoId"],
                tipo=data["tipo"],
                cantidad=data["cantidad"],
                usuario=request.user,
                motivo=data.get("motivo") or "",
                numero_guia=data.get("numeroGuia"),
            )
        except DatabaseError as e:
            logger.exception("Error registrando movimiento de inventario")
            return Response(
                {"success": False, "detail": f"Error al crear movimiento de inventario: {e}"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        mov = list_movements({"producto": mov.producto_id}).get(pk=mov.pk)
        return Response(
            {
                "success": True,
                "message": "Movimiento de inventario creado exitosamente",
                "movimiento": MovimientoSerializer(mov).data,
                "warning": warning,
            },
            status=status.HTTP_201_CREATED,
        )


# ======================================================================================
# /api/inventario/sync-validation/
# ======================================================================================


class SyncValidationView(APIView):
    """
    GET  -> reporte de sincronización (cualquier autenticado).
    POST {action: validate|migrate|clean, confirm?, productoIds?} -> sólo administradores.
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsInventoryAdmin()]
        return [IsAuthenticated()]

    def get(self, request: Request) -> Response:
        return _reporte_response(validar_sincronizacion())

    def post(self, request: Request) -> Response:
        ser = SyncActionSerializer(data=request.data)
        if not ser.is_valid():
            return Response(
                {"success": False, "error": "Datos inválidos", "detail": ser.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = ser.validated_data
        action = (data["action"] or "").strip().lower()

        if action == "validate":
            return _reporte_response(validar_sincronizacion())

        try:
            resultado = ejecutar_remediacion(
                action,
                usuario=request.user,
                producto_ids=data.get("productoIds"),
                confirmacion=data.get("confirm"),
            )
        except InvalidOperatorInput as e:
            return Response(
                {"success": False, "action": action, "error": str(e)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except StoreUnavailable as e:
            return Response(
                {"success": False, "action": action, "error": str(e)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        payload = resultado.as_dict()
        if not resultado.success:
            payload["error"] = resultado.message
        return Response(payload, status=_HTTP_POR_ESTADO.get(resultado.estado, status.HTTP_200_OK))


# ======================================================================================
# /api/inventario/remediaciones/
# ======================================================================================


class RemediacionViewSet(viewsets.ReadOnlyModelViewSet):
    """Historial de remediaciones (auditoría)."""
    queryset = Remediacion.objects.select_related("usuario").all()
    serializer_class = RemediacionSerializer
    permission_classes = [IsInventoryAdmin]
    pagination_class = RemediacionPagination
    filterset_fields = ("accion", "estado")
    ordering = ("-iniciada_en", "-id")
