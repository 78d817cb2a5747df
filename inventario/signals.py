# inventario/signals.py
# -*- coding: utf-8 -*-
"""
Un producto con movimientos no se elimina físicamente: se desactiva
(activo=False). El borrado se bloquea con ProductoReferenciado, que el API
de productos traduce a 409.
"""
from __future__ import annotations

import logging

from .exceptions import ProductoReferenciado
from .models import Movimiento

logger = logging.getLogger(__name__)


def bloquear_borrado_producto(sender, instance, **kwargs) -> None:
    total = Movimiento.objects.filter(producto_id=str(instance.pk)).count()
    if total:
        logger.warning(
            "Borrado bloqueado: producto %s tiene %d movimiento(s) de inventario",
            instance.pk,
            total,
        )
        raise ProductoReferenciado(str(instance.pk), total)
