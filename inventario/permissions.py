# inventario/permissions.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Iterable

from rest_framework.permissions import SAFE_METHODS, BasePermission
from rest_framework.request import Request

GRUPO_ADMIN = "ADMIN"
GRUPO_BODEGUERO = "BODEGUERO"


def _in_groups(user, names: Iterable[str]) -> bool:
    if not user or not user.is_authenticated:
        return False
    return bool(user.is_superuser or user.groups.filter(name__in=list(names)).exists())


def is_inventory_admin(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    return bool(user.is_staff or user.is_superuser or _in_groups(user, (GRUPO_ADMIN,)))


class IsInventoryAdmin(BasePermission):
    """
    Acciones de reparación (migrate / clean): staff, superuser o grupo ADMIN.
    """
    message = "Solo administradores pueden ejecutar acciones de reparación."

    def has_permission(self, request: Request, view) -> bool:  # type: ignore[override]
        return is_inventory_admin(getattr(request, "user", None))


class CanRegisterMovements(BasePermission):
    """
    Lectura: cualquier autenticado.
    Registro de movimientos: staff, superuser o grupos ADMIN/BODEGUERO.
    """
    message = "No tiene permiso para registrar movimientos de inventario."

    def has_permission(self, request: Request, view) -> bool:  # type: ignore[override]
        u = getattr(request, "user", None)
        if not u or not u.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return bool(u.is_staff or _in_groups(u, (GRUPO_ADMIN, GRUPO_BODEGUERO)))


__all__ = ["IsInventoryAdmin", "CanRegisterMovements", "is_inventory_admin"]
