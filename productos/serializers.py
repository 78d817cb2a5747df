# productos/serializers.py
# -*- coding: utf-8 -*-
"""
DRF serializers del catálogo.

`stock` es de sólo lectura: el saldo se modifica únicamente registrando
movimientos de inventario (ENTRADA / SALIDA / AJUSTE).
"""
from __future__ import annotations

from rest_framework import serializers

from .models import Categoria, Producto, UnidadMedida


class CategoriaSerializer(serializers.ModelSerializer):
    class Meta:
        model = Categoria
        fields = ["id", "nombre", "activo", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class UnidadMedidaSerializer(serializers.ModelSerializer):
    class Meta:
        model = UnidadMedida
        fields = ["id", "nombre", "simbolo", "permite_decimales", "activo"]
        read_only_fields = ["id"]


class ProductoSerializer(serializers.ModelSerializer):
    categoria_nombre = serializers.CharField(source="categoria.nombre", read_only=True, default=None)
    unidad_simbolo = serializers.CharField(source="unidad_medida.simbolo", read_only=True, default=None)

    class Meta:
        model = Producto
        fields = [
            "id",
            "sku",
            "nombre",
            "descripcion",
            "categoria",
            "categoria_nombre",
            "unidad_medida",
            "unidad_simbolo",
            "precio",
            "stock",
            "stock_minimo",
            "activo",
            "requiere_revision",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "stock", "created_at", "updated_at"]

    def validate_sku(self, value):
        value = (value or "").strip()
        return value or None

    def validate_stock_minimo(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("El stock mínimo no puede ser negativo.")
        return value
