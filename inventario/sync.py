# inventario/sync.py
# -*- coding: utf-8 -*-
"""
Validación de sincronización catálogo <-> libro de movimientos.

`validar_sincronizacion()` compara los ids del catálogo con los ids
referenciados por movimientos y devuelve un DriftReport:

  - orphanedInventory: ids con movimientos pero sin producto (error).
  - missingInventory: productos con stock > 0 y sin ningún movimiento (advertencia).
  - balanceMismatch: stock del catálogo distinto del último saldo del libro (advertencia).
  - discontinuities: cadena cantidad_nueva -> cantidad_anterior rota (advertencia).
  - invalidQuantities: movimientos con cantidad contradictoria (advertencia).

El reporte se calcula en cada llamada; nunca se persiste. Un fallo de lectura
no se confunde con "sin diferencias": storeUnavailable=True, isValid=False.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from django.apps import apps
from django.db import DatabaseError
from django.db.models import Exists, OuterRef
from django.utils import timezone

from . import selectors
from .conf import PRODUCT_MODEL, get_sync_config
from .exceptions import StoreUnavailable
from .models import Movimiento

logger = logging.getLogger(__name__)


@dataclass
class DriftReport:
    is_valid: bool = True
    orphaned_inventory: list[str] = field(default_factory=list)
    missing_inventory: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    balance_mismatch: list[str] = field(default_factory=list)
    discontinuities: list[str] = field(default_factory=list)
    invalid_quantities: int = 0
    store_unavailable: bool = False
    checked_at: Optional[datetime] = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "orphanedInventory": list(self.orphaned_inventory),
            "missingInventory": list(self.missing_inventory),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "balanceMismatch": list(self.balance_mismatch),
            "discontinuities": list(self.discontinuities),
            "invalidQuantities": self.invalid_quantities,
            "storeUnavailable": self.store_unavailable,
            "checkedAt": self.checked_at.isoformat() if self.checked_at else None,
        }

    def raise_for_store(self) -> "DriftReport":
        if self.store_unavailable:
            raise StoreUnavailable(self.errors[0] if self.errors else "Almacén no disponible")
        return self


def _listar(ids: list[str], limite: int) -> str:
    if len(ids) <= limite:
        return ", ".join(ids)
    return ", ".join(ids[:limite]) + f" (+{len(ids) - limite} más)"


def _catalog_ids(exclude_inactive: bool) -> set[str]:
    Producto = apps.get_model(PRODUCT_MODEL)
    qs = Producto.objects.order_by()
    if exclude_inactive:
        qs = qs.filter(activo=True)
    return {str(pk) for pk in qs.values_list("pk", flat=True)}


def _missing_inventory(exclude_inactive: bool) -> list[str]:
    Producto = apps.get_model(PRODUCT_MODEL)
    con_movimientos = Movimiento.objects.filter(producto_id=OuterRef("pk"))
    qs = Producto.objects.order_by().filter(stock__gt=0).filter(~Exists(con_movimientos))
    if exclude_inactive:
        qs = qs.filter(activo=True)
    return sorted(str(pk) for pk in qs.values_list("pk", flat=True))


def validar_sincronizacion(*, exclude_inactive: Optional[bool] = None) -> DriftReport:
    """
    Compara catálogo y libro. Nunca lanza por diferencias ni por fallas de
    lectura; ver DriftReport.raise_for_store().
    """
    cfg = get_sync_config()
    if exclude_inactive is None:
        exclude_inactive = cfg.exclude_inactive

    report = DriftReport(checked_at=timezone.now())
    try:
        catalog_ids = _catalog_ids(exclude_inactive)
        ledger_ids = selectors.distinct_product_ids()

        report.orphaned_inventory = sorted(ledger_ids - catalog_ids)
        report.missing_inventory = _missing_inventory(exclude_inactive)
        report.balance_mismatch = selectors.productos_con_saldo_distinto()
        report.invalid_quantities = selectors.cantidades_con_signo_invalido()
        if cfg.check_continuity:
            recorrido = selectors.recorrer_libro()
            report.discontinuities = recorrido.discontinuidades
            report.invalid_quantities += recorrido.saldos_incoherentes
    except DatabaseError as exc:
        logger.exception("Validación de sincronización: almacén no disponible")
        report.store_unavailable = True
        report.is_valid = False
        report.orphaned_inventory = []
        report.missing_inventory = []
        report.balance_mismatch = []
        report.discontinuities = []
        report.invalid_quantities = 0
        report.errors = [f"Error durante validación: {exc}"]
        return report

    limite = cfg.max_listed_ids
    if report.orphaned_inventory:
        report.errors.append(
            f"Movimientos huérfanos: {len(report.orphaned_inventory)} producto(s) con movimientos "
            f"no existen en el catálogo: {_listar(report.orphaned_inventory, limite)}"
        )
    if report.missing_inventory:
        report.warnings.append(
            f"{len(report.missing_inventory)} producto(s) con stock sin movimientos de inventario: "
            f"{_listar(report.missing_inventory, limite)}"
        )
    if report.balance_mismatch:
        report.warnings.append(
            f"{len(report.balance_mismatch)} producto(s) con stock distinto al saldo del libro: "
            f"{_listar(report.balance_mismatch, limite)}"
        )
    if report.discontinuities:
        report.warnings.append(
            f"{len(report.discontinuities)} producto(s) con saldos discontinuos entre movimientos: "
            f"{_listar(report.discontinuities, limite)}"
        )
    if report.invalid_quantities:
        report.warnings.append(
            f"{report.invalid_quantities} movimiento(s) con cantidades inválidas"
        )

    report.is_valid = not report.orphaned_inventory and not report.errors

    logger.info(
        "Validación de sincronización: valido=%s huerfanos=%d sin_movimientos=%d "
        "saldo_distinto=%d discontinuos=%d cantidades_invalidas=%d",
        report.is_valid,
        len(report.orphaned_inventory),
        len(report.missing_inventory),
        len(report.balance_mismatch),
        len(report.discontinuities),
        report.invalid_quantities,
    )
    return report


__all__ = ["DriftReport", "validar_sincronizacion"]
