# inventario/management/commands/sincronizar_inventario.py
# -*- coding: utf-8 -*-
"""
Valida o repara la sincronización catálogo <-> inventario.

Uso:

    python manage.py sincronizar_inventario
    python manage.py sincronizar_inventario --accion=migrar
    python manage.py sincronizar_inventario --accion=migrar --producto=abc123 --producto=def456
    python manage.py sincronizar_inventario --accion=limpiar --confirmar=IRREVERSIBLE --usuario=admin
"""
from __future__ import annotations

from typing import Optional

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from inventario.exceptions import InvalidOperatorInput, RemediationPartialFailure, StoreUnavailable
from inventario.remediation import ejecutar_remediacion
from inventario.sync import validar_sincronizacion

ACCIONES = {
    "validar": None,
    "migrar": "migrate",
    "limpiar": "clean",
}


class Command(BaseCommand):
    help = "Valida la sincronización producto/inventario y, si se indica, migra o limpia huérfanos."

    def add_arguments(self, parser):
        parser.add_argument(
            "--accion",
            choices=sorted(ACCIONES),
            default="validar",
            help="validar (por defecto), migrar o limpiar.",
        )
        parser.add_argument(
            "--producto",
            action="append",
            dest="productos",
            help="Id de producto huérfano a tratar (repetible). Por defecto: todos.",
        )
        parser.add_argument(
            "--confirmar",
            dest="confirmacion",
            help="Token de confirmación requerido por 'limpiar'.",
        )
        parser.add_argument(
            "--usuario",
            dest="username",
            help="Usuario que queda registrado como autor de la remediación.",
        )

    def handle(self, *args, **options):
        accion: str = options["accion"]

        if ACCIONES[accion] is None:
            self._validar()
            return

        usuario = self._usuario(options.get("username"))
        try:
            resultado = ejecutar_remediacion(
                ACCIONES[accion],
                usuario=usuario,
                producto_ids=options.get("productos"),
                confirmacion=options.get("confirmacion"),
            )
        except (InvalidOperatorInput, StoreUnavailable) as e:
            raise CommandError(str(e))

        for o in resultado.outcomes:
            line = f"  {o.producto_id}: {o.status} ({o.movimientos} movimiento(s))"
            if o.error:
                line += f" - {o.error}"
            style = self.style.ERROR if o.status == "fallido" else self.style.SUCCESS
            self.stdout.write(style(line))

        try:
            resultado.raise_for_status()
        except RemediationPartialFailure as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(resultado.message))

    def _validar(self) -> None:
        report = validar_sincronizacion()
        if report.store_unavailable:
            raise CommandError("; ".join(report.errors) or "Almacén no disponible")

        for err in report.errors:
            self.stdout.write(self.style.ERROR(f"✖ {err}"))
        for warn in report.warnings:
            self.stdout.write(self.style.WARNING(f"⚠ {warn}"))

        if report.is_valid:
            self.stdout.write(self.style.SUCCESS("✔ Catálogo e inventario sincronizados."))
        else:
            raise CommandError(
                f"{len(report.orphaned_inventory)} producto(s) huérfano(s) en inventario. "
                "Use --accion=migrar o --accion=limpiar."
            )

    def _usuario(self, username: Optional[str]):
        if not username:
            return None
        User = get_user_model()
        try:
            return User.objects.get(username=username)
        except User.DoesNotExist:
            raise CommandError(f"No existe el usuario '{username}'.")
