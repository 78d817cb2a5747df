# productos/services.py
# -*- coding: utf-8 -*-
"""
Interfaz de lectura/escritura del catálogo de productos.

El módulo de inventario consume el catálogo sólo a través de estas funciones:
- find_products: listado filtrable.
- get_by_id: lectura puntual (None si no existe).
- upsert_product: creación o actualización por id.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Tuple

from django.db import transaction
from django.db.models import Q, QuerySet

from .models import Producto

logger = logging.getLogger(__name__)


def find_products(
    *,
    ids: Optional[Iterable[str]] = None,
    activo: Optional[bool] = None,
    q: str = "",
) -> QuerySet[Producto]:
    qs = Producto.objects.select_related("categoria", "unidad_medida").all()
    if ids is not None:
        qs = qs.filter(pk__in=list(ids))
    if activo is not None:
        qs = qs.filter(activo=activo)
    q = (q or "").strip()
    if q:
        qs = qs.filter(Q(nombre__icontains=q) | Q(sku__icontains=q) | Q(descripcion__icontains=q))
    return qs


def get_by_id(producto_id: str) -> Optional[Producto]:
    if not producto_id:
        return None
    return (
        Producto.objects.select_related("categoria", "unidad_medida")
        .filter(pk=str(producto_id))
        .first()
    )


@transaction.atomic
def upsert_product(*, producto_id: Optional[str] = None, **fields: Any) -> Tuple[Producto, bool]:
    """
    Crea el producto (con el id indicado, si viene) o actualiza sus campos.
    Retorna (producto, created).
    """
    if producto_id:
        obj, created = Producto.objects.select_for_update().get_or_create(
            pk=str(producto_id),
            defaults=fields,
        )
        if not created and fields:
            for name, value in fields.items():
                setattr(obj, name, value)
            obj.save(update_fields=list(fields.keys()) + ["updated_at"])
    else:
        obj = Producto.objects.create(**fields)
        created = True

    logger.info(
        "Catálogo: producto %s %s",
        obj.pk,
        "creado" if created else "actualizado",
    )
    return obj, created


__all__ = ["find_products", "get_by_id", "upsert_product"]
