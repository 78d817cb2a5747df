from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import productos.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Categoria",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("nombre", models.CharField(db_index=True, max_length=80, unique=True)),
                ("activo", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "productos_categoria",
                "ordering": ["nombre"],
            },
        ),
        migrations.CreateModel(
            name="UnidadMedida",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("nombre", models.CharField(max_length=60)),
                ("simbolo", models.CharField(db_index=True, max_length=10, unique=True)),
                ("permite_decimales", models.BooleanField(default=False)),
                ("activo", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Unidad de medida",
                "verbose_name_plural": "Unidades de medida",
                "db_table": "productos_unidad_medida",
                "ordering": ["nombre"],
            },
        ),
        migrations.CreateModel(
            name="Producto",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=productos.models._nuevo_id,
                        editable=False,
                        max_length=40,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "sku",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Código interno / SKU (opcional, único si se especifica).",
                        max_length=50,
                        null=True,
                        unique=True,
                    ),
                ),
                ("nombre", models.CharField(db_index=True, max_length=200)),
                ("descripcion", models.TextField(blank=True, default="")),
                (
                    "precio",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("stock", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("stock_minimo", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("activo", models.BooleanField(db_index=True, default=True)),
                ("requiere_revision", models.BooleanField(db_index=True, default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "categoria",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="productos",
                        to="productos.categoria",
                    ),
                ),
                (
                    "unidad_medida",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="productos",
                        to="productos.unidadmedida",
                    ),
                ),
            ],
            options={
                "db_table": "productos_producto",
                "ordering": ["nombre"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("stock__gte", 0)),
                        name="productos_producto_stock_no_negativo",
                    )
                ],
            },
        ),
    ]
