# productos/models.py
from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


def _nuevo_id() -> str:
    return uuid.uuid4().hex


# =========================
# Catálogos livianos (front-admin)
# =========================

class Categoria(models.Model):
    """
    Catálogo de categorías de producto (Frutas, Verduras, Insumos, etc.).
    """
    nombre = models.CharField(max_length=80, unique=True, db_index=True)
    activo = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "productos_categoria"
        ordering = ["nombre"]

    def __str__(self) -> str:  # pragma: no cover
        return self.nombre


class UnidadMedida(models.Model):
    """
    Unidad de medida del stock.
    `permite_decimales` decide si las cantidades pueden llevar decimales (kg, lt)
    o deben ser enteras (unidad, caja).
    """
    nombre = models.CharField(max_length=60)
    simbolo = models.CharField(max_length=10, unique=True, db_index=True)
    permite_decimales = models.BooleanField(default=False)
    activo = models.BooleanField(default=True)

    class Meta:
        db_table = "productos_unidad_medida"
        ordering = ["nombre"]
        verbose_name = "Unidad de medida"
        verbose_name_plural = "Unidades de medida"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.nombre} ({self.simbolo})"

    @classmethod
    def get_default(cls) -> "UnidadMedida":
        """Unidad usada para productos creados sin unidad explícita (placeholders)."""
        simbolo = getattr(settings, "INVENTARIO_SYNC", {}).get("DEFAULT_UNIT_SYMBOL", "UND")
        obj, _ = cls.objects.get_or_create(
            simbolo=simbolo,
            defaults={"nombre": "Unidad", "permite_decimales": False},
        )
        return obj


# =========================
# Producto
# =========================

class Producto(models.Model):
    """
    Entrada del catálogo. El campo `stock` es la proyección (caché) del libro de
    movimientos de inventario: sólo lo escriben el registro de movimientos y la
    migración de huérfanos.
    """
    id = models.CharField(primary_key=True, max_length=40, default=_nuevo_id, editable=False)

    # ======== Identificación ========
    sku = models.CharField(
        max_length=50,
        unique=True,
        null=True,
        blank=True,
        db_index=True,
        help_text="Código interno / SKU (opcional, único si se especifica).",
    )
    nombre = models.CharField(max_length=200, db_index=True)
    descripcion = models.TextField(blank=True, default="")

    categoria = models.ForeignKey(
        Categoria,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="productos",
    )
    unidad_medida = models.ForeignKey(
        UnidadMedida,
        on_delete=models.PROTECT,
        related_name="productos",
    )

    # ======== Stock / precio ========
    precio = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    stock = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    stock_minimo = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    # Soft delete
    activo = models.BooleanField(default=True, db_index=True)
    # Marcado en los productos creados por la migración de huérfanos
    requiere_revision = models.BooleanField(default=False, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "productos_producto"
        ordering = ["nombre"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="productos_producto_stock_no_negativo",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        head = (self.sku or "").strip()
        return " – ".join([p for p in [head, self.nombre] if p]) or f"Producto #{self.pk}"
