# inventario/services/stock.py

from dataclasses import dataclass
from decimal import Decimal

from django.db.models import Case, DecimalField, F, Sum, Value, When
from django.db.models.functions import Coalesce

from inventario.models import Bodega, MovimientoDetalle, Producto, Stock, TipoMovimiento
from inventario.services.precios import desglose_cajas


def obtener_stock(*, producto_id, bodega_id=None) -> Decimal:
    """
    Cantidad de un producto en una bodega, o la suma de todas las bodegas
    si no se indica bodega. Sin registro de stock → 0.
    """
    qs = Stock.objects.filter(producto_id=producto_id)
    if bodega_id is not None:
        qs = qs.filter(bodega_id=bodega_id)

    total = qs.aggregate(
        total=Coalesce(Sum("cantidad"), Value(Decimal("0")), output_field=DecimalField())
    )["total"]
    return total or Decimal("0")


def desglose_stock(*, producto_id) -> list[dict]:
    """
    Stock por bodega de un producto. Si el producto maneja cajas, agrega
    cajas completas y unidades sueltas.
    """
    producto = Producto.objects.get(pk=producto_id)
    filas = []
    stocks = (
        Stock.objects.select_related("bodega")
        .filter(producto=producto)
        .order_by("bodega__nombre", "bodega_id")
    )
    for stock in stocks:
        fila = {
            "bodega_id": stock.bodega_id,
            "bodega": stock.bodega.nombre,
            "cantidad": stock.cantidad,
        }
        cajas = desglose_cajas(producto, stock.cantidad)
        if cajas is not None:
            fila["cajas"], fila["sueltas"] = cajas
        filas.append(fila)
    return filas


def _cantidad_con_signo():
    return Case(
        When(movimiento__tipo=TipoMovimiento.INGRESO, then=F("cantidad")),
        default=-F("cantidad"),
        output_field=DecimalField(max_digits=18, decimal_places=3),
    )


def stock_segun_movimientos(*, producto_id, bodega_id) -> Decimal:
    """
    Recalcula el stock desde el ledger:
        sum(ingresos) - sum(despachos)
    """
    total = MovimientoDetalle.objects.filter(
        producto_id=producto_id,
        movimiento__bodega_id=bodega_id,
    ).aggregate(total=Sum(_cantidad_con_signo()))["total"]
    return total or Decimal("0")


@dataclass
class InconsistenciaStock:
    producto_id: int
    bodega_id: int
    cantidad_stock: Decimal
    cantidad_movimientos: Decimal

    @property
    def diferencia(self) -> Decimal:
        return self.cantidad_stock - self.cantidad_movimientos


def verificar_consistencia_stock(*, bodega: Bodega | None = None) -> list[InconsistenciaStock]:
    """
    Compara cada registro de Stock con la suma de movimientos confirmados.
    Lista vacía = consistente. También detecta stock negativo y pares con
    movimientos pero sin registro de stock.
    """
    detalles = MovimientoDetalle.objects.all()
    stocks = Stock.objects.all()

    if bodega is not None:
        detalles = detalles.filter(movimiento__bodega=bodega)
        stocks = stocks.filter(bodega=bodega)

    movimientos = (
        detalles.values("producto_id", bodega_id=F("movimiento__bodega_id"))
        .annotate(total=Sum(_cantidad_con_signo()))
        .order_by()
    )

    esperado = {
        (m["producto_id"], m["bodega_id"]): m["total"] or Decimal("0")
        for m in movimientos
    }
    actual = {(s.producto_id, s.bodega_id): s.cantidad for s in stocks}

    inconsistencias: list[InconsistenciaStock] = []
    for par in sorted(set(esperado) | set(actual)):
        cantidad_stock = actual.get(par, Decimal("0"))
        cantidad_movimientos = esperado.get(par, Decimal("0"))
        if cantidad_stock != cantidad_movimientos or cantidad_stock < 0:
            inconsistencias.append(
                InconsistenciaStock(
                    producto_id=par[0],
                    bodega_id=par[1],
                    cantidad_stock=cantidad_stock,
                    cantidad_movimientos=cantidad_movimientos,
                )
            )
    return inconsistencias
