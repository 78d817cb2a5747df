# inventario/tests/test_ledger.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.exceptions import NotFound, ValidationError

from inventario.models import Movimiento
from inventario.selectors import (
    distinct_product_ids,
    ledger_balance,
    list_movements,
    recorrer_libro,
)
from inventario.services import append_movement, delete_movements

from .utils import crear_producto, movimiento_directo, unidad

User = get_user_model()


class AppendMovementTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(username="bodega", password="x", first_name="Ana", last_name="Ruiz")
        self.p = crear_producto("P1", stock="0", stock_minimo="5", nombre="Cable HDMI", sku="HDMI-1")

    def test_entrada_updates_stock_and_records_balances(self):
        mov, warning = append_movement(producto_id="P1", tipo="entrada", cantidad="10", usuario=self.user)

        self.p.refresh_from_db()
        self.assertEqual(self.p.stock, Decimal("10"))
        self.assertEqual(mov.tipo, Movimiento.TIPO_ENTRADA)
        self.assertEqual(mov.cantidad_anterior, Decimal("0"))
        self.assertEqual(mov.cantidad_nueva, Decimal("10"))
        self.assertEqual(mov.producto_nombre, "Cable HDMI")
        self.assertEqual(mov.producto_sku, "HDMI-1")
        self.assertEqual(mov.usuario, self.user)
        self.assertIsNone(warning)

    def test_salida_below_minimum_returns_warning(self):
        append_movement(producto_id="P1", tipo="ENTRADA", cantidad="6")
        _, warning = append_movement(producto_id="P1", tipo="SALIDA", cantidad="2")
        self.assertEqual(warning, "El nuevo stock queda por debajo del mínimo")

    def test_salida_insufficient_stock_is_rejected(self):
        append_movement(producto_id="P1", tipo="ENTRADA", cantidad="3")
        with self.assertRaises(ValidationError) as ctx:
            append_movement(producto_id="P1", tipo="SALIDA", cantidad="4")
        self.assertIn("Stock insuficiente", str(ctx.exception.detail))

        self.p.refresh_from_db()
        self.assertEqual(self.p.stock, Decimal("3"))
        self.assertEqual(Movimiento.objects.filter(producto_id="P1").count(), 1)

    def test_negative_ajuste_cannot_go_below_zero(self):
        append_movement(producto_id="P1", tipo="ENTRADA", cantidad="2")
        with self.assertRaises(ValidationError):
            append_movement(producto_id="P1", tipo="AJUSTE", cantidad="-3")
        mov, _ = append_movement(producto_id="P1", tipo="AJUSTE", cantidad="-2")
        self.assertEqual(mov.cantidad, Decimal("-2"))
        self.assertEqual(mov.cantidad_nueva, Decimal("0"))

    def test_rejects_non_positive_amounts(self):
        with self.assertRaises(ValidationError):
            append_movement(producto_id="P1", tipo="ENTRADA", cantidad="0")
        with self.assertRaises(ValidationError):
            append_movement(producto_id="P1", tipo="SALIDA", cantidad="-1")
        with self.assertRaises(ValidationError):
            append_movement(producto_id="P1", tipo="AJUSTE", cantidad="0")
        with self.assertRaises(ValidationError):
            append_movement(producto_id="P1", tipo="TRASLADO", cantidad="1")
        self.assertFalse(Movimiento.objects.exists())

    def test_rejects_decimals_for_integer_units(self):
        with self.assertRaises(ValidationError):
            append_movement(producto_id="P1", tipo="ENTRADA", cantidad="1.5")

    def test_decimal_units_are_rounded_to_cents(self):
        crear_producto("KG", unidad_medida=unidad("KG", permite_decimales=True))
        mov, _ = append_movement(producto_id="KG", tipo="ENTRADA", cantidad="1.255")
        self.assertEqual(mov.cantidad, Decimal("1.26"))

    def test_missing_or_inactive_product(self):
        with self.assertRaises(NotFound):
            append_movement(producto_id="NOPE", tipo="ENTRADA", cantidad="1")
        crear_producto("OFF", activo=False)
        with self.assertRaises(ValidationError):
            append_movement(producto_id="OFF", tipo="ENTRADA", cantidad="1")


class BalanceContinuityTests(TestCase):
    def test_chain_and_projection_agree_with_ledger(self):
        p = crear_producto("P1")
        for tipo, cantidad in [
            ("ENTRADA", "10"),
            ("SALIDA", "4"),
            ("AJUSTE", "3"),
            ("AJUSTE", "-1"),
            ("ENTRADA", "7"),
        ]:
            append_movement(producto_id="P1", tipo=tipo, cantidad=cantidad)

        movs = list(Movimiento.objects.filter(producto_id="P1").order_by("created_at", "id"))
        for prev, nxt in zip(movs, movs[1:]):
            self.assertEqual(prev.cantidad_nueva, nxt.cantidad_anterior)
        for m in movs:
            self.assertEqual(m.cantidad_anterior + m.delta, m.cantidad_nueva)

        p.refresh_from_db()
        self.assertEqual(p.stock, Decimal("15"))
        self.assertEqual(ledger_balance("P1"), p.stock)
        self.assertEqual(movs[-1].cantidad_nueva, p.stock)
        self.assertEqual(recorrer_libro().discontinuidades, [])
        self.assertEqual(recorrer_libro().saldos_incoherentes, 0)

    def test_walk_reports_broken_chain(self):
        movimiento_directo("P9", "ENTRADA", "5", "0", "5")
        movimiento_directo("P9", "SALIDA", "1", "3", "2")
        self.assertEqual(recorrer_libro().discontinuidades, ["P9"])

    def test_ledger_balance_without_movements_is_zero(self):
        self.assertEqual(ledger_balance("NADA"), Decimal("0"))


class ListMovementsTests(TestCase):
    def setUp(self) -> None:
        crear_producto("P1", nombre="Cable HDMI", sku="HDMI-1")
        append_movement(producto_id="P1", tipo="ENTRADA", cantidad="5", motivo="Compra")
        append_movement(producto_id="P1", tipo="SALIDA", cantidad="2", motivo="Venta")
        movimiento_directo("P404", "ENTRADA", "3", "0", "3", nombre="Foto vieja")

    def test_orphans_stay_listed_in_descending_order(self):
        rows = list(list_movements())
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0].producto_id, "P404")
        self.assertIsNone(rows[0].nombre_actual)
        self.assertEqual(rows[1].nombre_actual, "Cable HDMI")
        self.assertEqual(rows[1].tipo, "SALIDA")

    def test_filters(self):
        self.assertEqual(list_movements({"producto": "P1"}).count(), 2)
        self.assertEqual(list_movements({"tipo": "salida"}).count(), 1)
        self.assertEqual(list_movements({"q": "compra"}).count(), 1)
        self.assertEqual(list_movements({"q": "hdmi"}).count(), 2)
        self.assertEqual(list_movements({"q": "foto"}).count(), 1)
        # Fecha inválida: se ignora el filtro
        self.assertEqual(list_movements({"desde": "no-es-fecha"}).count(), 3)

    def test_distinct_product_ids(self):
        self.assertEqual(distinct_product_ids(), {"P1", "P404"})

    def test_delete_movements(self):
        ids = list(Movimiento.objects.filter(producto_id="P404").values_list("id", flat=True))
        self.assertEqual(delete_movements(ids), 1)
        self.assertEqual(delete_movements([]), 0)
        self.assertEqual(distinct_product_ids(), {"P1"})
