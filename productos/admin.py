# productos/admin.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from django.contrib import admin

from .models import Categoria, Producto, UnidadMedida


@admin.register(Categoria)
class CategoriaAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "activo")
    search_fields = ("nombre",)
    list_filter = ("activo",)


@admin.register(UnidadMedida)
class UnidadMedidaAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "simbolo", "permite_decimales", "activo")
    search_fields = ("nombre", "simbolo")


@admin.register(Producto)
class ProductoAdmin(admin.ModelAdmin):
    list_display = ("id", "sku", "nombre", "stock", "stock_minimo", "precio", "activo", "requiere_revision")
    list_filter = ("activo", "requiere_revision", "categoria")
    search_fields = ("id", "sku", "nombre")
    # El stock sólo cambia vía movimientos de inventario
    readonly_fields = ("stock", "created_at", "updated_at")
