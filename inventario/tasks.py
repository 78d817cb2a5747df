# inventario/tasks.py
from __future__ import annotations

import logging
from typing import Any, Dict

from celery import shared_task

from .sync import validar_sincronizacion

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def revalidar_sincronizacion_task(self) -> Dict[str, Any]:
    """
    Revalida catálogo <-> inventario en background (sólo lectura).

    Nunca remedia: migrate/clean siempre los decide un operador.
    Si el almacén no responde, reintenta hasta max_retries.
    """
    report = validar_sincronizacion()
    if report.store_unavailable:
        logger.warning("revalidar_sincronizacion_task: almacén no disponible (%s)", "; ".join(report.errors))
        if self.request.retries < self.max_retries:
            raise self.retry(countdown=60 * (2**self.request.retries))
        return report.as_dict()

    if report.is_valid:
        logger.info("revalidar_sincronizacion_task: sincronizado (%d advertencia(s))", len(report.warnings))
    else:
        logger.warning(
            "revalidar_sincronizacion_task: %d producto(s) huérfano(s) en inventario: %s",
            len(report.orphaned_inventory),
            ", ".join(report.orphaned_inventory[:20]),
        )
    return report.as_dict()
