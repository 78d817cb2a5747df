# inventario/remediation.py
# -*- coding: utf-8 -*-
"""
Remediación de movimientos huérfanos (ids con movimientos y sin producto).

Dos estrategias excluyentes, siempre elegidas por un operador:

- migrate: crea (o reactiva) el producto faltante con un nombre marcador y
  `requiere_revision=True`. No toca movimientos. Una transacción por id.
- clean: elimina los movimientos de los ids huérfanos. Irreversible; exige el
  token de confirmación. Una sola transacción para todo el conjunto.

Cada id se bloquea con su fila en BloqueoRemediacion (orden ascendente) antes
de tocarlo. Al terminar se vuelve a validar y cualquier id que siga huérfano
se reporta como fallido.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Optional

from django.apps import apps
from django.db import DatabaseError, transaction
from django.utils import timezone

from . import selectors
from .conf import PRODUCT_MODEL, SyncConfig, get_sync_config
from .exceptions import InvalidOperatorInput, RemediationPartialFailure, StoreUnavailable
from .models import BloqueoRemediacion, Movimiento, Remediacion
from .sync import DriftReport, validar_sincronizacion

logger = logging.getLogger(__name__)

ACCIONES = (Remediacion.ACCION_MIGRATE, Remediacion.ACCION_CLEAN)

MIGRADO = "migrado"
REACTIVADO = "reactivado"
ELIMINADO = "eliminado"
OMITIDO = "omitido"
FALLIDO = "fallido"

_PROCESADOS = {MIGRADO, REACTIVADO, ELIMINADO}


@dataclass
class ResultadoId:
    producto_id: str
    status: str
    movimientos: int = 0
    error: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "productoId": self.producto_id,
            "status": self.status,
            "movimientos": self.movimientos,
            "error": self.error,
        }


@dataclass
class ResultadoRemediacion:
    accion: str
    estado: str
    message: str
    outcomes: list[ResultadoId] = field(default_factory=list)
    sync_validation: Optional[DriftReport] = None
    remediacion_id: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.estado == Remediacion.ESTADO_COMPLETADA

    def ids_con(self, status: str) -> list[str]:
        return [o.producto_id for o in self.outcomes if o.status == status]

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "action": self.accion,
            "estado": self.estado,
            "message": self.message,
            "remediacionId": self.remediacion_id,
            "outcomes": [o.as_dict() for o in self.outcomes],
            "syncValidation": self.sync_validation.as_dict() if self.sync_validation else None,
        }

    def raise_for_status(self) -> "ResultadoRemediacion":
        if not self.success:
            raise RemediationPartialFailure(self.message, resultado=self)
        return self


# ======================================================================================
# Validación de entrada (antes de cualquier acceso al almacén)
# ======================================================================================


def _normalizar_accion(accion) -> str:
    value = str(accion or "").strip().lower()
    if value not in ACCIONES:
        raise InvalidOperatorInput(f"Acción no válida: '{accion}'. Use 'migrate' o 'clean'.")
    return value


def _normalizar_ids(producto_ids: Optional[Iterable[Any]]) -> Optional[list[str]]:
    if producto_ids is None:
        return None
    if isinstance(producto_ids, (str, bytes)):
        raise InvalidOperatorInput("productoIds debe ser una lista de ids.")
    ids = sorted({str(x).strip() for x in producto_ids if x is not None and str(x).strip()})
    if not ids:
        raise InvalidOperatorInput("La lista de productos objetivo está vacía.")
    return ids


# ======================================================================================
# Unidades de trabajo
# ======================================================================================


def _bloquear(producto_id: str, accion: str) -> None:
    lock, created = BloqueoRemediacion.objects.select_for_update().get_or_create(
        producto_id=producto_id,
        defaults={"ultima_accion": accion},
    )
    if not created and lock.ultima_accion != accion:
        lock.ultima_accion = accion
        lock.save(update_fields=["ultima_accion", "actualizado_en"])


def _sku_libre(Producto, sku: str) -> bool:
    return bool(sku) and not Producto.objects.filter(sku=sku).exists()


def _migrar_uno(producto_id: str, cfg: SyncConfig) -> ResultadoId:
    """Una transacción: bloqueo -> re-chequeo -> crear o reactivar."""
    from productos.models import UnidadMedida
    from productos.services import upsert_product

    Producto = apps.get_model(PRODUCT_MODEL)
    with transaction.atomic():
        _bloquear(producto_id, Remediacion.ACCION_MIGRATE)

        ultimo = selectors.ultimo_movimiento(producto_id)
        if ultimo is None:
            return ResultadoId(producto_id, OMITIDO, error="Ya no tiene movimientos.")
        total = Movimiento.objects.filter(producto_id=producto_id).count()

        existente = Producto.objects.select_for_update().filter(pk=producto_id).first()
        if existente is not None:
            if cfg.exclude_inactive and not existente.activo:
                existente.activo = True
                existente.requiere_revision = True
                existente.save(update_fields=["activo", "requiere_revision", "updated_at"])
                logger.info("Remediación migrate: producto %s reactivado", producto_id)
                return ResultadoId(producto_id, REACTIVADO, movimientos=total)
            return ResultadoId(producto_id, OMITIDO, movimientos=total, error="Ya existe en el catálogo.")

        sufijo = producto_id[-8:]
        nombre, sku = selectors.ultima_foto(producto_id)
        if not nombre:
            nombre = f"{cfg.placeholder_prefix} {sufijo}"
        if not _sku_libre(Producto, sku):
            sku = f"{cfg.placeholder_sku_prefix}{sufijo}"
            if not _sku_libre(Producto, sku):
                sku = None

        stock = ultimo.cantidad_nueva if ultimo.cantidad_nueva and ultimo.cantidad_nueva > 0 else Decimal("0")

        upsert_product(
            producto_id=producto_id,
            nombre=nombre[:200],
            sku=sku,
            descripcion="Producto migrado automáticamente desde inventario",
            unidad_medida=UnidadMedida.get_default(),
            stock=stock,
            activo=cfg.exclude_inactive,
            requiere_revision=True,
        )
        logger.info("Remediación migrate: producto %s creado como '%s' (stock=%s)", producto_id, nombre, stock)
        return ResultadoId(producto_id, MIGRADO, movimientos=total)


def _limpiar(objetivos: list[str], cfg: SyncConfig) -> list[ResultadoId]:
    """Una transacción para todo el conjunto: o se eliminan todos o ninguno."""
    Producto = apps.get_model(PRODUCT_MODEL)
    with transaction.atomic():
        for pid in sorted(objetivos):
            _bloquear(pid, Remediacion.ACCION_CLEAN)

        en_catalogo = Producto.objects.filter(pk__in=objetivos)
        if cfg.exclude_inactive:
            en_catalogo = en_catalogo.filter(activo=True)
        resueltos = {str(pk) for pk in en_catalogo.values_list("pk", flat=True)}

        huerfanos = [pid for pid in objetivos if pid not in resueltos]
        conteos = selectors.movements_count_by_product(huerfanos)
        if huerfanos:
            Movimiento.objects.filter(producto_id__in=huerfanos).delete()

    out: list[ResultadoId] = []
    for pid in objetivos:
        if pid in resueltos:
            out.append(ResultadoId(pid, OMITIDO, error="Ya existe en el catálogo."))
        elif not conteos.get(pid):
            out.append(ResultadoId(pid, OMITIDO, error="Ya no tiene movimientos."))
        else:
            out.append(ResultadoId(pid, ELIMINADO, movimientos=conteos[pid]))
            logger.info("Remediación clean: %d movimiento(s) eliminados del producto %s", conteos[pid], pid)
    return out


# ======================================================================================
# Punto de entrada
# ======================================================================================


def _estado_final(outcomes: list[ResultadoId]) -> str:
    fallidos = sum(1 for o in outcomes if o.status == FALLIDO)
    if not fallidos:
        return Remediacion.ESTADO_COMPLETADA
    if any(o.status in _PROCESADOS for o in outcomes):
        return Remediacion.ESTADO_PARCIAL
    return Remediacion.ESTADO_FALLIDA


def _mensaje(accion: str, estado: str, outcomes: list[ResultadoId]) -> str:
    procesados = sum(1 for o in outcomes if o.status in _PROCESADOS)
    fallidos = sum(1 for o in outcomes if o.status == FALLIDO)
    verbo = "migrado(s)" if accion == Remediacion.ACCION_MIGRATE else "limpiado(s)"
    if not outcomes:
        return "No hay movimientos huérfanos; no se realizaron cambios."
    if estado == Remediacion.ESTADO_COMPLETADA:
        return f"Remediación completada: {procesados} producto(s) {verbo}."
    if estado == Remediacion.ESTADO_PARCIAL:
        return f"Remediación parcial: {procesados} producto(s) {verbo}, {fallidos} con error."
    return f"Remediación fallida: {fallidos} producto(s) con error."


def ejecutar_remediacion(
    accion: str,
    *,
    usuario=None,
    producto_ids: Optional[Iterable[Any]] = None,
    confirmacion: Optional[str] = None,
) -> ResultadoRemediacion:
    """
    Ejecuta migrate/clean sobre los ids huérfanos actuales (o su intersección
    con `producto_ids`) y devuelve el resultado por id con una validación fresca.

    Raises:
        InvalidOperatorInput: acción desconocida, lista vacía o confirmación inválida.
        StoreUnavailable: no se pudo leer el estado inicial.
    """
    cfg = get_sync_config()
    accion = _normalizar_accion(accion)
    solicitados = _normalizar_ids(producto_ids)
    if accion == Remediacion.ACCION_CLEAN and (confirmacion or "") != cfg.clean_confirmation:
        raise InvalidOperatorInput(
            f"La limpieza es irreversible: envíe confirm='{cfg.clean_confirmation}' para continuar."
        )

    inicial = validar_sincronizacion().raise_for_store()
    huerfanos = set(inicial.orphaned_inventory)
    if solicitados is None:
        objetivos = sorted(huerfanos)
        outcomes: list[ResultadoId] = []
    else:
        objetivos = [pid for pid in solicitados if pid in huerfanos]
        outcomes = [
            ResultadoId(pid, OMITIDO, error="No figura como huérfano.")
            for pid in solicitados
            if pid not in huerfanos
        ]

    actor = usuario if getattr(usuario, "is_authenticated", False) else None
    try:
        registro = Remediacion.objects.create(accion=accion, usuario=actor, objetivos=objetivos)
    except DatabaseError as exc:
        logger.exception("Remediación %s: no se pudo registrar el inicio", accion)
        raise StoreUnavailable(f"No se pudo registrar la remediación: {exc}") from exc

    logger.info(
        "Remediación #%s %s iniciada por %s sobre %d id(s)",
        registro.pk,
        accion,
        selectors.display_name(actor) or "sistema",
        len(objetivos),
    )

    if accion == Remediacion.ACCION_MIGRATE:
        for pid in objetivos:
            try:
                outcomes.append(_migrar_uno(pid, cfg))
            except DatabaseError as exc:
                logger.exception("Remediación migrate: error en producto %s", pid)
                outcomes.append(ResultadoId(pid, FALLIDO, error=f"Error migrando producto {pid}: {exc}"))
    elif objetivos:
        try:
            outcomes.extend(_limpiar(objetivos, cfg))
        except DatabaseError as exc:
            logger.exception("Remediación clean: error; no se eliminó ningún movimiento")
            outcomes.extend(
                ResultadoId(pid, FALLIDO, error=f"Error limpiando huérfanos: {exc}") for pid in objetivos
            )

    final = validar_sincronizacion()
    siguen = set(final.orphaned_inventory)
    for o in outcomes:
        if o.status not in _PROCESADOS:
            continue
        if final.store_unavailable:
            o.status, o.error = FALLIDO, "No se pudo verificar el resultado (almacén no disponible)."
        elif o.producto_id in siguen:
            o.status, o.error = FALLIDO, "Sigue huérfano tras la remediación."

    outcomes.sort(key=lambda o: o.producto_id)
    estado = _estado_final(outcomes)
    resultado = ResultadoRemediacion(
        accion=accion,
        estado=estado,
        message=_mensaje(accion, estado, outcomes),
        outcomes=outcomes,
        sync_validation=final,
        remediacion_id=registro.pk,
    )

    try:
        Remediacion.objects.filter(pk=registro.pk).update(
            estado=estado,
            resultados=[o.as_dict() for o in outcomes],
            mensaje=resultado.message,
            finalizada_en=timezone.now(),
        )
    except DatabaseError:
        logger.exception("Remediación #%s: no se pudo guardar el resultado", registro.pk)

    log = logger.info if resultado.success else logger.warning
    log("Remediación #%s %s terminada: %s. %s", registro.pk, accion, estado, resultado.message)
    return resultado


__all__ = [
    "ResultadoId",
    "ResultadoRemediacion",
    "ejecutar_remediacion",
    "MIGRADO",
    "REACTIVADO",
    "ELIMINADO",
    "OMITIDO",
    "FALLIDO",
]
