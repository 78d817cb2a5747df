# inventario/tests/test_remediation.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase, override_settings

from inventario import remediation
from inventario.exceptions import InvalidOperatorInput, RemediationPartialFailure
from inventario.models import BloqueoRemediacion, Movimiento, Remediacion
from inventario.remediation import ResultadoId, ejecutar_remediacion
from inventario.sync import validar_sincronizacion
from productos.models import Producto

from .utils import crear_producto, movimiento_directo

User = get_user_model()


class InputValidationTests(TestCase):
    def test_unknown_action(self):
        with self.assertNumQueries(0):
            with self.assertRaises(InvalidOperatorInput):
                ejecutar_remediacion("borrar")

    def test_empty_target_list(self):
        with self.assertNumQueries(0):
            with self.assertRaises(InvalidOperatorInput):
                ejecutar_remediacion("migrate", producto_ids=[])

    def test_clean_requires_confirmation(self):
        movimiento_directo("P404", "ENTRADA", "3", "0", "3")
        with self.assertNumQueries(0):
            with self.assertRaises(InvalidOperatorInput):
                ejecutar_remediacion("clean")
            with self.assertRaises(InvalidOperatorInput):
                ejecutar_remediacion("clean", confirmacion="si")
        self.assertEqual(Movimiento.objects.filter(producto_id="P404").count(), 1)

    @override_settings(INVENTARIO_SYNC={"CLEAN_CONFIRMATION": "BORRAR"})
    def test_confirmation_token_is_configurable(self):
        movimiento_directo("P404", "ENTRADA", "3", "0", "3")
        with self.assertRaises(InvalidOperatorInput):
            ejecutar_remediacion("clean", confirmacion="IRREVERSIBLE")
        self.assertTrue(ejecutar_remediacion("clean", confirmacion="BORRAR").success)


class MigrateTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username="admin", password="x", is_staff=True)
        crear_producto("P1")
        movimiento_directo("P1", "ENTRADA", "1", "0", "1")
        movimiento_directo("huerfano-0000abcd", "ENTRADA", "5", "0", "5")
        movimiento_directo("huerfano-0000abcd", "SALIDA", "2", "5", "3")
        movimiento_directo("P777", "ENTRADA", "4", "0", "4", nombre="Cable HDMI", sku="HDMI-1")

    def test_migrate_creates_flagged_placeholders(self):
        resultado = ejecutar_remediacion("migrate", usuario=self.admin)

        self.assertTrue(resultado.success)
        self.assertEqual(resultado.estado, Remediacion.ESTADO_COMPLETADA)
        self.assertEqual(resultado.ids_con(remediation.MIGRADO), ["P777", "huerfano-0000abcd"])
        self.assertTrue(resultado.sync_validation.is_valid)
        self.assertEqual(resultado.sync_validation.orphaned_inventory, [])

        sin_foto = Producto.objects.get(pk="huerfano-0000abcd")
        self.assertEqual(sin_foto.nombre, "Producto Migrado 0000abcd")
        self.assertEqual(sin_foto.sku, "MIG-0000abcd")
        self.assertEqual(sin_foto.stock, Decimal("3"))
        self.assertTrue(sin_foto.requiere_revision)
        self.assertFalse(sin_foto.activo)

        con_foto = Producto.objects.get(pk="P777")
        self.assertEqual(con_foto.nombre, "Cable HDMI")
        self.assertEqual(con_foto.sku, "HDMI-1")

    def test_migrate_never_touches_movements(self):
        before = list(Movimiento.objects.order_by("id").values_list("id", "producto_id", "cantidad"))
        ejecutar_remediacion("migrate")
        after = list(Movimiento.objects.order_by("id").values_list("id", "producto_id", "cantidad"))
        self.assertEqual(before, after)

    def test_migrate_is_idempotent(self):
        ejecutar_remediacion("migrate")
        total = Producto.objects.count()

        segunda = ejecutar_remediacion("migrate")
        self.assertTrue(segunda.success)
        self.assertEqual(segunda.outcomes, [])
        self.assertEqual(Producto.objects.count(), total)

    def test_requested_ids_are_intersected_with_orphans(self):
        resultado = ejecutar_remediacion("migrate", producto_ids=["P777", "P1", "NO-EXISTE"])

        status = {o.producto_id: o.status for o in resultado.outcomes}
        self.assertEqual(status, {"P777": "migrado", "P1": "omitido", "NO-EXISTE": "omitido"})
        self.assertTrue(resultado.success)
        self.assertEqual(resultado.sync_validation.orphaned_inventory, ["huerfano-0000abcd"])

    def test_taken_sku_falls_back_to_marker(self):
        crear_producto("OTRO", sku="HDMI-1")
        ejecutar_remediacion("migrate", producto_ids=["P777"])
        self.assertEqual(Producto.objects.get(pk="P777").sku, "MIG-P777")

    def test_audit_record_and_locks(self):
        resultado = ejecutar_remediacion("migrate", usuario=self.admin)

        registro = Remediacion.objects.get(pk=resultado.remediacion_id)
        self.assertEqual(registro.accion, "migrate")
        self.assertEqual(registro.estado, Remediacion.ESTADO_COMPLETADA)
        self.assertEqual(registro.usuario, self.admin)
        self.assertEqual(registro.objetivos, ["P777", "huerfano-0000abcd"])
        self.assertEqual(len(registro.resultados), 2)
        self.assertIsNotNone(registro.finalizada_en)
        self.assertEqual(
            set(BloqueoRemediacion.objects.values_list("producto_id", flat=True)),
            {"P777", "huerfano-0000abcd"},
        )

    def test_partial_failure(self):
        real = remediation._migrar_uno

        def flaky(pid, cfg):
            if pid == "P777":
                raise DatabaseError("lock wait timeout")
            return real(pid, cfg)

        with patch("inventario.remediation._migrar_uno", side_effect=flaky):
            resultado = ejecutar_remediacion("migrate")

        self.assertFalse(resultado.success)
        self.assertEqual(resultado.estado, Remediacion.ESTADO_PARCIAL)
        self.assertEqual(resultado.ids_con(remediation.FALLIDO), ["P777"])
        self.assertEqual(resultado.ids_con(remediation.MIGRADO), ["huerfano-0000abcd"])
        self.assertEqual(resultado.sync_validation.orphaned_inventory, ["P777"])
        with self.assertRaises(RemediationPartialFailure):
            resultado.raise_for_status()

    def test_unresolved_ids_are_downgraded_to_failed(self):
        with patch(
            "inventario.remediation._migrar_uno",
            side_effect=lambda pid, cfg: ResultadoId(pid, remediation.MIGRADO),
        ):
            resultado = ejecutar_remediacion("migrate")

        self.assertEqual(resultado.estado, Remediacion.ESTADO_FALLIDA)
        self.assertEqual(resultado.ids_con(remediation.FALLIDO), ["P777", "huerfano-0000abcd"])

    @override_settings(INVENTARIO_SYNC={"EXCLUDE_INACTIVE": True})
    def test_excluded_inactive_rows_are_reactivated(self):
        crear_producto("VIEJO", activo=False)
        movimiento_directo("VIEJO", "ENTRADA", "2", "0", "2")

        resultado = ejecutar_remediacion("migrate", producto_ids=["VIEJO"])

        self.assertTrue(resultado.success)
        self.assertEqual(resultado.ids_con(remediation.REACTIVADO), ["VIEJO"])
        viejo = Producto.objects.get(pk="VIEJO")
        self.assertTrue(viejo.activo)
        self.assertTrue(viejo.requiere_revision)

    @override_settings(INVENTARIO_SYNC={"EXCLUDE_INACTIVE": True})
    def test_placeholders_are_active_when_inactive_rows_are_excluded(self):
        resultado = ejecutar_remediacion("migrate", producto_ids=["P777"])
        self.assertTrue(resultado.success)
        self.assertTrue(Producto.objects.get(pk="P777").activo)


class CleanTests(TestCase):
    def setUp(self) -> None:
        crear_producto("P1", stock="1")
        movimiento_directo("P1", "ENTRADA", "1", "0", "1")
        movimiento_directo("P404", "ENTRADA", "3", "0", "3")
        movimiento_directo("P404", "SALIDA", "1", "3", "2")
        movimiento_directo("P405", "ENTRADA", "1", "0", "1")

    def test_clean_orphan_makes_store_valid(self):
        resultado = ejecutar_remediacion("clean", confirmacion="IRREVERSIBLE")

        self.assertTrue(resultado.success)
        self.assertTrue(resultado.sync_validation.is_valid)
        self.assertEqual(
            {o.producto_id: (o.status, o.movimientos) for o in resultado.outcomes},
            {"P404": ("eliminado", 2), "P405": ("eliminado", 1)},
        )
        self.assertFalse(Movimiento.objects.filter(producto_id__in=["P404", "P405"]).exists())

    def test_clean_scope_is_limited_to_requested_orphans(self):
        catalogo = list(Producto.objects.order_by("pk").values_list("pk", "stock"))

        resultado = ejecutar_remediacion("clean", producto_ids=["P404"], confirmacion="IRREVERSIBLE")

        self.assertTrue(resultado.success)
        self.assertFalse(Movimiento.objects.filter(producto_id="P404").exists())
        self.assertEqual(Movimiento.objects.filter(producto_id="P405").count(), 1)
        self.assertEqual(Movimiento.objects.filter(producto_id="P1").count(), 1)
        self.assertEqual(list(Producto.objects.order_by("pk").values_list("pk", "stock")), catalogo)
        self.assertEqual(resultado.sync_validation.orphaned_inventory, ["P405"])

    def test_clean_is_all_or_nothing(self):
        with patch(
            "inventario.remediation.selectors.movements_count_by_product",
            side_effect=DatabaseError("deadlock"),
        ):
            resultado = ejecutar_remediacion("clean", confirmacion="IRREVERSIBLE")

        self.assertEqual(resultado.estado, Remediacion.ESTADO_FALLIDA)
        self.assertEqual(resultado.ids_con(remediation.FALLIDO), ["P404", "P405"])
        self.assertEqual(Movimiento.objects.filter(producto_id__in=["P404", "P405"]).count(), 3)

    def test_clean_without_orphans_is_a_noop(self):
        ejecutar_remediacion("clean", confirmacion="IRREVERSIBLE")
        total = Movimiento.objects.count()

        resultado = ejecutar_remediacion("clean", confirmacion="IRREVERSIBLE")
        self.assertTrue(resultado.success)
        self.assertEqual(resultado.outcomes, [])
        self.assertEqual(Movimiento.objects.count(), total)

    def test_clean_never_removes_catalog_movements(self):
        ejecutar_remediacion("clean", producto_ids=["P1", "P404"], confirmacion="IRREVERSIBLE")
        self.assertEqual(Movimiento.objects.filter(producto_id="P1").count(), 1)
        self.assertEqual(validar_sincronizacion().orphaned_inventory, ["P405"])
