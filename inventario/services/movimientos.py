# inventario/services/movimientos.py

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from inventario.models import (
    Bodega,
    Cliente,
    Movimiento,
    MovimientoDetalle,
    Producto,
    Proveedor,
    Stock,
    TipoMovimiento,
)
from inventario.services.errores import (
    MovimientoInvalidoError,
    MovimientoInventarioError,
    StockInsuficienteError,
)
from inventario.services.precios import (
    cajas_a_unidades,
    normalizar_precio_tipo,
    resolver_costo_unitario,
    resolver_motivo_descuento,
    resolver_precio_unitario,
)

logger = logging.getLogger(__name__)


@dataclass
class LineaMovimiento:
    """Línea ya limpiada, lista para aplicarse dentro de la transacción."""
    producto_id: int
    cantidad: Decimal
    costo_unitario: Decimal | None = None
    precio_unitario: Decimal | None = None
    precio_tipo: str | None = None
    motivo_descuento: str | None = None
    cajas: Decimal | None = None


def _a_decimal(valor, campo: str) -> Decimal | None:
    if valor is None or valor == "":
        return None
    if isinstance(valor, bool):
        raise MovimientoInvalidoError(f"El campo '{campo}' debe ser numérico.")
    try:
        numero = Decimal(str(valor))
    except (InvalidOperation, ValueError):
        raise MovimientoInvalidoError(f"El campo '{campo}' debe ser numérico.")
    if not numero.is_finite():
        raise MovimientoInvalidoError(f"El campo '{campo}' debe ser numérico.")
    return numero


def _normalizar_tipo(tipo) -> str:
    valor = str(tipo or "").strip().upper()
    if valor not in TipoMovimiento.values:
        raise MovimientoInvalidoError(f"Tipo de movimiento inválido: {tipo}.")
    return valor


def _limpiar_detalles(tipo: str, detalles) -> list[LineaMovimiento]:
    """
    Descarta las líneas sin producto o con cantidad vacía/cero.
    Una cantidad negativa o no numérica invalida TODO el movimiento.
    """
    if not isinstance(detalles, (list, tuple)):
        raise MovimientoInvalidoError("Los detalles deben ser una lista.")

    lineas: list[LineaMovimiento] = []
    for idx, detalle in enumerate(detalles, start=1):
        if not isinstance(detalle, dict):
            raise MovimientoInvalidoError(f"Detalle inválido (L{idx}).")
        producto_id = detalle.get("producto_id")
        if producto_id in (None, ""):
            continue

        try:
            producto_id = int(producto_id)
        except (TypeError, ValueError):
            raise MovimientoInvalidoError(f"Detalle inválido (L{idx}): producto_id no es válido.")

        cantidad = _a_decimal(detalle.get("cantidad"), "cantidad")
        cajas = None
        if tipo == TipoMovimiento.DESPACHO:
            cajas = _a_decimal(detalle.get("cajas"), "cajas")

        if cantidad is not None and cantidad < 0:
            raise MovimientoInvalidoError(f"Detalle inválido (L{idx}): la cantidad no puede ser negativa.")
        if cajas is not None and cajas < 0:
            raise MovimientoInvalidoError(f"Detalle inválido (L{idx}): las cajas no pueden ser negativas.")

        if not cantidad and not cajas:
            continue

        linea = LineaMovimiento(producto_id=producto_id, cantidad=cantidad or Decimal("0"), cajas=cajas)
        if tipo == TipoMovimiento.INGRESO:
            linea.costo_unitario = _a_decimal(detalle.get("costo_unitario"), "costo_unitario")
            if linea.costo_unitario is not None and linea.costo_unitario < 0:
                raise MovimientoInvalidoError(f"Detalle inválido (L{idx}): el costo no puede ser negativo.")
        else:
            linea.precio_tipo = normalizar_precio_tipo(detalle.get("precio_tipo"))
            linea.precio_unitario = _a_decimal(detalle.get("precio_unitario"), "precio_unitario")
            if linea.precio_unitario is not None and linea.precio_unitario < 0:
                raise MovimientoInvalidoError(f"Detalle inválido (L{idx}): el precio no puede ser negativo.")
            linea.motivo_descuento = detalle.get("motivo_descuento")
        lineas.append(linea)

    return lineas


def _obtener(modelo, pk, nombre: str):
    try:
        return modelo.objects.get(pk=pk)
    except (modelo.DoesNotExist, ValueError, TypeError):
        raise MovimientoInvalidoError(f"No existe {nombre} con id {pk}.")


def _bloquear_stocks(bodega: Bodega, producto_ids) -> dict[int, Stock]:
    """
    Bloquea (select_for_update) las filas de stock de los productos en la
    bodega, siempre en orden de producto para evitar deadlocks. Crea las
    que falten en 0.
    """
    ids = sorted(set(producto_ids))
    stocks = {
        s.producto_id: s
        for s in Stock.objects.select_for_update()
        .filter(bodega=bodega, producto_id__in=ids)
        .order_by("producto_id")
    }
    for producto_id in ids:
        if producto_id not in stocks:
            stock, _created = Stock.objects.select_for_update().get_or_create(
                producto_id=producto_id,
                bodega=bodega,
                defaults={"cantidad": Decimal("0")},
            )
            stocks[producto_id] = stock
    return stocks


@transaction.atomic
def _aplicar_movimiento(
    *,
    tipo: str,
    bodega_id,
    contraparte_id,
    lineas: list[LineaMovimiento],
    observacion: str,
    fecha,
    usuario,
) -> Movimiento:
    bodega = _obtener(Bodega, bodega_id, "bodega")

    proveedor = cliente = None
    if contraparte_id:
        if tipo == TipoMovimiento.INGRESO:
            proveedor = _obtener(Proveedor, contraparte_id, "proveedor")
        else:
            cliente = _obtener(Cliente, contraparte_id, "cliente")

    productos = Producto.objects.in_bulk({linea.producto_id for linea in lineas})
    faltantes = sorted({linea.producto_id for linea in lineas} - set(productos))
    if faltantes:
        raise MovimientoInvalidoError(
            "No existen productos con id: {}.".format(", ".join(str(pk) for pk in faltantes))
        )

    movimiento = Movimiento.objects.create(
        tipo=tipo,
        fecha=fecha or timezone.now(),
        bodega=bodega,
        proveedor=proveedor,
        cliente=cliente,
        usuario=usuario,
        observacion=(observacion or "").strip(),
    )

    stocks = _bloquear_stocks(bodega, productos.keys())
    signo = Decimal("1") if tipo == TipoMovimiento.INGRESO else Decimal("-1")
    solicitado: dict[int, Decimal] = defaultdict(lambda: Decimal("0"))

    for idx, linea in enumerate(lineas, start=1):
        producto = productos[linea.producto_id]

        cantidad = linea.cantidad
        if linea.cajas:
            cantidad += cajas_a_unidades(producto, linea.cajas)
        if cantidad <= 0:
            raise MovimientoInvalidoError(f"Detalle inválido (L{idx}): la cantidad debe ser > 0.")

        if tipo == TipoMovimiento.INGRESO:
            MovimientoDetalle.objects.create(
                movimiento=movimiento,
                producto=producto,
                cantidad=cantidad,
                costo_unitario=resolver_costo_unitario(producto, linea.costo_unitario),
            )
        else:
            MovimientoDetalle.objects.create(
                movimiento=movimiento,
                producto=producto,
                cantidad=cantidad,
                precio_unitario=resolver_precio_unitario(
                    producto, linea.precio_tipo, linea.precio_unitario
                ),
                precio_tipo=linea.precio_tipo,
                motivo_descuento=resolver_motivo_descuento(linea.precio_tipo, linea.motivo_descuento),
            )

        stocks[producto.id].cantidad += signo * cantidad
        solicitado[producto.id] += cantidad

    # Ningún stock tocado puede quedar negativo antes del commit
    for producto_id, stock in stocks.items():
        if stock.cantidad < 0:
            raise StockInsuficienteError(
                producto=productos[producto_id],
                bodega=bodega,
                disponible=stock.cantidad + solicitado[producto_id],
                solicitado=solicitado[producto_id],
            )

    for stock in stocks.values():
        stock.save(update_fields=["cantidad", "updated_at"])

    return movimiento


def registrar_movimiento(
    *,
    tipo: str,
    bodega_id,
    detalles,
    contraparte_id=None,
    observacion: str = "",
    fecha=None,
    usuario=None,
) -> Movimiento:
    """
    Registra un movimiento (cabecera + líneas) y actualiza el stock en una
    sola transacción: o queda todo o no queda nada.

    - contraparte_id es el proveedor en ingresos y el cliente en despachos.
    - Las líneas sin producto o con cantidad 0/vacía se descartan.
    - Sin bodega o sin líneas válidas → MovimientoInvalidoError, antes de
      abrir la transacción.
    - Producto/bodega/contraparte inexistente o cantidad inválida →
      MovimientoInvalidoError y rollback.
    - Despacho que deja stock negativo → StockInsuficienteError y rollback.
    - Errores de base de datos se propagan tal cual (rollback, sin reintento).
    """
    try:
        tipo = _normalizar_tipo(tipo)
        if not bodega_id:
            raise MovimientoInvalidoError("bodega_id y al menos un detalle son obligatorios.")

        lineas = _limpiar_detalles(tipo, detalles or [])
        if not lineas:
            raise MovimientoInvalidoError("bodega_id y al menos un detalle son obligatorios.")

        movimiento = _aplicar_movimiento(
            tipo=tipo,
            bodega_id=bodega_id,
            contraparte_id=contraparte_id,
            lineas=lineas,
            observacion=observacion,
            fecha=fecha,
            usuario=usuario,
        )
    except MovimientoInventarioError as exc:
        logger.warning("Movimiento %s rechazado (bodega=%s): %s", tipo, bodega_id, exc)
        raise

    logger.info(
        "Movimiento %s #%s registrado en bodega %s con %s líneas",
        movimiento.tipo,
        movimiento.pk,
        movimiento.bodega_id,
        len(lineas),
    )
    return movimiento


def registrar_ingreso(
    *,
    bodega_id,
    detalles,
    proveedor_id=None,
    observacion: str = "",
    fecha=None,
    usuario=None,
) -> Movimiento:
    """Ingreso de mercadería. Detalles: producto_id, cantidad, costo_unitario."""
    return registrar_movimiento(
        tipo=TipoMovimiento.INGRESO,
        bodega_id=bodega_id,
        detalles=detalles,
        contraparte_id=proveedor_id,
        observacion=observacion,
        fecha=fecha,
        usuario=usuario,
    )


def registrar_despacho(
    *,
    bodega_id,
    detalles,
    cliente_id=None,
    observacion: str = "",
    fecha=None,
    usuario=None,
) -> Movimiento:
    """
    Despacho de mercadería. Detalles: producto_id, cantidad (unidades),
    precio_tipo, precio_unitario (solo cuenta en DESCUENTO),
    motivo_descuento y opcionalmente cajas.
    """
    return registrar_movimiento(
        tipo=TipoMovimiento.DESPACHO,
        bodega_id=bodega_id,
        detalles=detalles,
        contraparte_id=cliente_id,
        observacion=observacion,
        fecha=fecha,
        usuario=usuario,
    )
