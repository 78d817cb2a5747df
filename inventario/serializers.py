# inventario/serializers.py
# -*- coding: utf-8 -*-
"""
Serializers del API de inventario (/api/inventario/).

Las claves de salida van en camelCase (productoNombre, usuarioNombre, ...),
el formato que consume el front de inventario.
"""
from __future__ import annotations

from rest_framework import serializers

from .models import Movimiento, Remediacion
from .selectors import display_name


class MovimientoSerializer(serializers.ModelSerializer):
    """
    Fila del libro. Espera un queryset de `selectors.list_movements()`
    (anotado con nombre_actual / sku_actual).
    """
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    productoId = serializers.CharField(source="producto_id", read_only=True)
    productoNombre = serializers.SerializerMethodField()
    productoSku = serializers.SerializerMethodField()
    cantidadAnterior = serializers.DecimalField(
        source="cantidad_anterior", max_digits=14, decimal_places=2, read_only=True
    )
    cantidadNueva = serializers.DecimalField(
        source="cantidad_nueva", max_digits=14, decimal_places=2, read_only=True
    )
    numeroGuia = serializers.CharField(source="numero_guia", read_only=True, allow_null=True)
    usuarioNombre = serializers.SerializerMethodField()
    huerfano = serializers.SerializerMethodField()

    class Meta:
        model = Movimiento
        fields = [
            "id",
            "createdAt",
            "tipo",
            "productoId",
            "productoNombre",
            "productoSku",
            "cantidad",
            "cantidadAnterior",
            "cantidadNueva",
            "motivo",
            "numeroGuia",
            "usuarioNombre",
            "huerfano",
        ]
        read_only_fields = fields

    def get_productoNombre(self, obj: Movimiento) -> str:
        return getattr(obj, "nombre_actual", None) or obj.producto_nombre or ""

    def get_productoSku(self, obj: Movimiento) -> str:
        return getattr(obj, "sku_actual", None) or obj.producto_sku or ""

    def get_usuarioNombre(self, obj: Movimiento) -> str:
        return display_name(obj.usuario)

    def get_huerfano(self, obj: Movimiento) -> bool:
        if not hasattr(obj, "nombre_actual"):
            return False
        return obj.nombre_actual is None


class MovimientoCreateSerializer(serializers.Serializer):
    """Entrada de POST /api/inventario/ (las reglas de negocio viven en services)."""
    productoId = serializers.CharField(max_length=40)
    tipo = serializers.CharField(max_length=10)
    cantidad = serializers.DecimalField(max_digits=18, decimal_places=6)
    motivo = serializers.CharField(required=False, allow_blank=True, default="")
    numeroGuia = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)

    def validate_tipo(self, value: str) -> str:
        value = (value or "").strip().upper()
        if value not in {Movimiento.TIPO_ENTRADA, Movimiento.TIPO_SALIDA, Movimiento.TIPO_AJUSTE}:
            raise serializers.ValidationError("Tipo inválido. Use ENTRADA, SALIDA o AJUSTE.")
        return value


class SyncActionSerializer(serializers.Serializer):
    """Entrada de POST /api/inventario/sync-validation/."""
    action = serializers.CharField(max_length=20)
    confirm = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    productoIds = serializers.ListField(
        child=serializers.CharField(max_length=40),
        required=False,
        allow_empty=True,
        allow_null=True,
        default=None,
    )


class RemediacionSerializer(serializers.ModelSerializer):
    usuarioNombre = serializers.SerializerMethodField()

    class Meta:
        model = Remediacion
        fields = [
            "id",
            "accion",
            "estado",
            "usuarioNombre",
            "objetivos",
            "resultados",
            "mensaje",
            "iniciada_en",
            "finalizada_en",
        ]
        read_only_fields = fields

    def get_usuarioNombre(self, obj: Remediacion) -> str:
        return display_name(obj.usuario)


__all__ = [
    "MovimientoSerializer",
    "MovimientoCreateSerializer",
    "SyncActionSerializer",
    "RemediacionSerializer",
]
