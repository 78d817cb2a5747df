# inventario/conf.py
# -*- coding: utf-8 -*-
"""
Configuración del módulo de sincronización producto/inventario.

En settings.py:

    INVENTARIO_SYNC = {
        "EXCLUDE_INACTIVE": False,
        "CHECK_CONTINUITY": True,
        "CLEAN_CONFIRMATION": "IRREVERSIBLE",
        ...
    }

Las claves ausentes toman el valor por defecto de SyncConfig.
"""
from __future__ import annotations

from dataclasses import dataclass, fields

from django.conf import settings


@dataclass(frozen=True)
class SyncConfig:
    exclude_inactive: bool = False
    check_continuity: bool = True
    clean_confirmation: str = "IRREVERSIBLE"
    placeholder_prefix: str = "Producto Migrado"
    placeholder_sku_prefix: str = "MIG-"
    default_unit_symbol: str = "UND"
    max_listed_ids: int = 50


def get_sync_config() -> SyncConfig:
    """Lee INVENTARIO_SYNC en cada llamada (override_settings funciona en tests)."""
    raw = getattr(settings, "INVENTARIO_SYNC", None) or {}
    values = {f.name: raw[f.name.upper()] for f in fields(SyncConfig) if f.name.upper() in raw}
    cfg = SyncConfig(**values)
    # Normaliza tipos (los valores pueden venir de variables de entorno)
    return SyncConfig(
        exclude_inactive=bool(cfg.exclude_inactive),
        check_continuity=bool(cfg.check_continuity),
        clean_confirmation=str(cfg.clean_confirmation),
        placeholder_prefix=str(cfg.placeholder_prefix),
        placeholder_sku_prefix=str(cfg.placeholder_sku_prefix),
        default_unit_symbol=str(cfg.default_unit_symbol),
        max_listed_ids=max(1, int(cfg.max_listed_ids)),
    )


PRODUCT_MODEL = getattr(settings, "INVENTARIO_PRODUCT_MODEL", "productos.Producto")
