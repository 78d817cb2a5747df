# inventario/apps.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from django.apps import AppConfig
from django.db.models.signals import post_migrate, pre_delete

logger = logging.getLogger(__name__)


def _connect_signals(cfg: "InventarioConfig") -> None:
    from django.apps import apps as django_apps

    from .conf import PRODUCT_MODEL
    from .signals import bloquear_borrado_producto

    pre_delete.connect(
        bloquear_borrado_producto,
        sender=django_apps.get_model(PRODUCT_MODEL),
        dispatch_uid="inventario_pre_delete_producto_referenciado",
    )

    def ensure_inventario_groups(sender, **kwargs) -> None:
        """
        Post-migrate: grupos base ADMIN y BODEGUERO.
          - ADMIN: todos los permisos de 'inventario' (incluye remediación vía API).
          - BODEGUERO: ver y registrar movimientos.
        """
        if getattr(sender, "label", "") != cfg.label:
            return

        from django.contrib.auth.models import Group, Permission
        from django.db import transaction

        with transaction.atomic():
            admin_group, _ = Group.objects.get_or_create(name="ADMIN")
            bodeguero_group, _ = Group.objects.get_or_create(name="BODEGUERO")

            admin_group.permissions.add(*Permission.objects.filter(content_type__app_label=cfg.label))
            bodeguero_group.permissions.add(
                *Permission.objects.filter(
                    content_type__app_label=cfg.label,
                    codename__in=["view_movimiento", "add_movimiento"],
                )
            )
        logger.debug("inventario: grupos ADMIN/BODEGUERO verificados.")

    post_migrate.connect(
        ensure_inventario_groups,
        sender=cfg,
        dispatch_uid="inventario_post_migrate_ensure_groups",
    )


class InventarioConfig(AppConfig):
    """
    Libro de movimientos de inventario y sincronización con el catálogo.
    """
    default_auto_field = "django.db.models.BigAutoField"
    name = "inventario"
    label = "inventario"
    verbose_name = "Inventario"

    def ready(self) -> None:  # type: ignore[override]
        _connect_signals(self)
