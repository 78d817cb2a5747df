# inventario/models.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

# ======================================================================================
# Libro de movimientos de inventario
# ======================================================================================


class Movimiento(models.Model):
    """
    Movimiento de inventario (libro append-only).

    - `producto_id` es una referencia de texto SIN llave foránea: el movimiento
      debe seguir siendo legible aunque el producto ya no exista en el catálogo
      (eso es justamente lo que detecta la validación de sincronización).
    - `cantidad`: magnitud positiva para ENTRADA/SALIDA; con signo para AJUSTE.
    - `cantidad_anterior` / `cantidad_nueva`: saldo observado antes y después
      del movimiento, capturado al momento de escribirlo.
    - `producto_nombre` / `producto_sku`: foto del producto al registrar.

    Nunca se edita. Sólo la limpieza de huérfanos puede eliminarlo.
    """
    TIPO_ENTRADA = "ENTRADA"
    TIPO_SALIDA = "SALIDA"
    TIPO_AJUSTE = "AJUSTE"
    TIPO_CHOICES = [
        (TIPO_ENTRADA, "Entrada"),
        (TIPO_SALIDA, "Salida"),
        (TIPO_AJUSTE, "Ajuste"),
    ]

    created_at = models.DateTimeField(default=timezone.now, db_index=True, editable=False)
    tipo = models.CharField(max_length=10, choices=TIPO_CHOICES, db_index=True)

    producto_id = models.CharField("Producto (id)", max_length=40, db_index=True)
    producto_nombre = models.CharField(max_length=200, blank=True, default="")
    producto_sku = models.CharField(max_length=50, blank=True, default="")

    cantidad = models.DecimalField(max_digits=14, decimal_places=2)
    cantidad_anterior = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    cantidad_nueva = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="movimientos_inventario",
    )
    motivo = models.TextField(blank=True, default="")
    numero_guia = models.CharField("Número de guía", max_length=60, null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["producto_id", "created_at"], name="idx_mov_producto_fecha"),
        ]
        verbose_name = "Movimiento de inventario"
        verbose_name_plural = "Movimientos de inventario"

    def __str__(self) -> str:
        return f"#{self.pk or 'new'} {self.tipo} {self.cantidad} P:{self.producto_id}"

    @property
    def delta(self) -> Decimal:
        """Efecto con signo sobre el saldo."""
        cantidad = self.cantidad or Decimal("0")
        if self.tipo == self.TIPO_ENTRADA:
            return abs(cantidad)
        if self.tipo == self.TIPO_SALIDA:
            return -abs(cantidad)
        return cantidad


# ======================================================================================
# Remediación de huérfanos (migrate / clean)
# ======================================================================================


class BloqueoRemediacion(models.Model):
    """
    Fila de bloqueo por producto_id. Toda unidad de remediación que toca un id
    toma antes `select_for_update` sobre su fila: dos remediaciones sobre el
    mismo id nunca corren a la vez.
    """
    producto_id = models.CharField(max_length=40, unique=True)
    ultima_accion = models.CharField(max_length=10, blank=True, default="")
    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Bloqueo de remediación"
        verbose_name_plural = "Bloqueos de remediación"

    def __str__(self) -> str:  # pragma: no cover
        return f"Lock {self.producto_id} ({self.ultima_accion or '-'})"


class Remediacion(models.Model):
    """
    Registro (auditoría) de cada ejecución de migrate/clean con su resultado por id.
    """
    ACCION_MIGRATE = "migrate"
    ACCION_CLEAN = "clean"
    ACCION_CHOICES = [
        (ACCION_MIGRATE, "Migrar huérfanos"),
        (ACCION_CLEAN, "Limpiar huérfanos (irreversible)"),
    ]

    ESTADO_EJECUTANDO = "EJECUTANDO"
    ESTADO_COMPLETADA = "COMPLETADA"
    ESTADO_PARCIAL = "PARCIAL"
    ESTADO_FALLIDA = "FALLIDA"
    ESTADO_CHOICES = [
        (ESTADO_EJECUTANDO, "Ejecutando"),
        (ESTADO_COMPLETADA, "Completada"),
        (ESTADO_PARCIAL, "Parcial"),
        (ESTADO_FALLIDA, "Fallida"),
    ]

    accion = models.CharField(max_length=10, choices=ACCION_CHOICES, db_index=True)
    estado = models.CharField(max_length=12, choices=ESTADO_CHOICES, default=ESTADO_EJECUTANDO, db_index=True)
    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="remediaciones_inventario",
    )
    objetivos = models.JSONField(default=list, blank=True)
    resultados = models.JSONField(default=list, blank=True)
    mensaje = models.TextField(blank=True, default="")
    iniciada_en = models.DateTimeField(default=timezone.now, db_index=True)
    finalizada_en = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-iniciada_en", "-id"]
        verbose_name = "Remediación"
        verbose_name_plural = "Remediaciones"

    def __str__(self) -> str:
        return f"#{self.pk or 'new'} {self.accion} {self.estado}"
