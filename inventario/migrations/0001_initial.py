from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="BloqueoRemediacion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("producto_id", models.CharField(max_length=40, unique=True)),
                ("ultima_accion", models.CharField(blank=True, default="", max_length=10)),
                ("actualizado_en", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Bloqueo de remediación",
                "verbose_name_plural": "Bloqueos de remediación",
            },
        ),
        migrations.CreateModel(
            name="Movimiento",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "created_at",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now, editable=False),
                ),
                (
                    "tipo",
                    models.CharField(
                        choices=[("ENTRADA", "Entrada"), ("SALIDA", "Salida"), ("AJUSTE", "Ajuste")],
                        db_index=True,
                        max_length=10,
                    ),
                ),
                ("producto_id", models.CharField(db_index=True, max_length=40, verbose_name="Producto (id)")),
                ("producto_nombre", models.CharField(blank=True, default="", max_length=200)),
                ("producto_sku", models.CharField(blank=True, default="", max_length=50)),
                ("cantidad", models.DecimalField(decimal_places=2, max_digits=14)),
                (
                    "cantidad_anterior",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                (
                    "cantidad_nueva",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                ("motivo", models.TextField(blank=True, default="")),
                (
                    "numero_guia",
                    models.CharField(blank=True, max_length=60, null=True, verbose_name="Número de guía"),
                ),
                (
                    "usuario",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="movimientos_inventario",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Movimiento de inventario",
                "verbose_name_plural": "Movimientos de inventario",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["producto_id", "created_at"], name="idx_mov_producto_fecha"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Remediacion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "accion",
                    models.CharField(
                        choices=[("migrate", "Migrar huérfanos"), ("clean", "Limpiar huérfanos (irreversible)")],
                        db_index=True,
                        max_length=10,
                    ),
                ),
                (
                    "estado",
                    models.CharField(
                        choices=[
                            ("EJECUTANDO", "Ejecutando"),
                            ("COMPLETADA", "Completada"),
                            ("PARCIAL", "Parcial"),
                            ("FALLIDA", "Fallida"),
                        ],
                        db_index=True,
                        default="EJECUTANDO",
                        max_length=12,
                    ),
                ),
                ("objetivos", models.JSONField(blank=True, default=list)),
                ("resultados", models.JSONField(blank=True, default=list)),
                ("mensaje", models.TextField(blank=True, default="")),
                ("iniciada_en", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("finalizada_en", models.DateTimeField(blank=True, null=True)),
                (
                    "usuario",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="remediaciones_inventario",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Remediación",
                "verbose_name_plural": "Remediaciones",
                "ordering": ["-iniciada_en", "-id"],
            },
        ),
    ]
