# inventario/admin.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from django.contrib import admin, messages

from .models import BloqueoRemediacion, Movimiento, Remediacion
from .sync import validar_sincronizacion


class _ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Movimiento)
class MovimientoAdmin(_ReadOnlyAdmin):
    """Libro append-only: sin altas, cambios ni bajas desde el admin."""
    list_display = (
        "id",
        "created_at",
        "tipo",
        "producto_id",
        "producto_nombre",
        "cantidad",
        "cantidad_anterior",
        "cantidad_nueva",
        "usuario",
    )
    list_filter = ("tipo", "created_at")
    search_fields = ("producto_id", "producto_nombre", "producto_sku", "motivo", "numero_guia")
    date_hierarchy = "created_at"
    list_select_related = ("usuario",)
    actions = ["validar_sincronizacion"]

    @admin.action(description="Validar sincronización catálogo / inventario")
    def validar_sincronizacion(self, request, queryset):
        report = validar_sincronizacion()
        if report.store_unavailable:
            self.message_user(request, "; ".join(report.errors), level=messages.ERROR)
            return
        for err in report.errors:
            self.message_user(request, err, level=messages.ERROR)
        for warn in report.warnings:
            self.message_user(request, warn, level=messages.WARNING)
        if report.is_valid and not report.warnings:
            self.message_user(request, "Catálogo e inventario sincronizados.", level=messages.SUCCESS)


@admin.register(Remediacion)
class RemediacionAdmin(_ReadOnlyAdmin):
    list_display = ("id", "accion", "estado", "usuario", "iniciada_en", "finalizada_en")
    list_filter = ("accion", "estado")
    search_fields = ("mensaje",)
    list_select_related = ("usuario",)


@admin.register(BloqueoRemediacion)
class BloqueoRemediacionAdmin(_ReadOnlyAdmin):
    list_display = ("producto_id", "ultima_accion", "actualizado_en")
    search_fields = ("producto_id",)
