# inventario/services/precios.py

from decimal import Decimal, InvalidOperation

from inventario.models import PrecioTipo, Producto
from inventario.services.errores import MovimientoInvalidoError, PrecioTipoInvalidoError


CERO = Decimal("0")


def _precio(valor) -> Decimal | None:
    """None y 0 cuentan como "sin precio"."""
    if valor is None:
        return None
    valor = Decimal(valor)
    if valor == 0:
        return None
    return valor


def normalizar_precio_tipo(precio_tipo) -> str:
    """
    Devuelve el tipo de precio en mayúsculas. Vacío → NORMAL.
    """
    if precio_tipo is None or str(precio_tipo).strip() == "":
        return PrecioTipo.NORMAL
    valor = str(precio_tipo).strip().upper()
    if valor not in PrecioTipo.values:
        raise PrecioTipoInvalidoError(f"Tipo de precio inválido: {precio_tipo}.")
    return valor


def resolver_precio_unitario(
    producto: Producto,
    precio_tipo: str,
    precio_manual: Decimal | None = None,
) -> Decimal:
    """
    Precio unitario a guardar en una línea de despacho.

    - NORMAL     → precio_venta, o 0.
    - MAYORISTA  → precio_mayorista, si no precio_venta, si no 0.
    - CAJA       → precio_caja (ya es precio por unidad en modo caja), o 0.
                   Si el producto no tiene caja configurada queda en 0.
    - DESCUENTO  → precio_manual manda; si no vino, precio_venta, o 0.

    Solo DESCUENTO toma en cuenta precio_manual.
    """
    precio_tipo = normalizar_precio_tipo(precio_tipo)

    if precio_tipo == PrecioTipo.NORMAL:
        return _precio(producto.precio_venta) or CERO

    if precio_tipo == PrecioTipo.MAYORISTA:
        return _precio(producto.precio_mayorista) or _precio(producto.precio_venta) or CERO

    if precio_tipo == PrecioTipo.CAJA:
        if not producto.tiene_caja:
            return CERO
        return _precio(producto.precio_caja) or CERO

    # DESCUENTO
    if precio_manual is not None:
        return Decimal(precio_manual)
    return _precio(producto.precio_venta) or CERO


def resolver_motivo_descuento(precio_tipo: str, motivo: str | None) -> str | None:
    if normalizar_precio_tipo(precio_tipo) != PrecioTipo.DESCUENTO:
        return None
    if motivo is None:
        return None
    motivo = str(motivo).strip()
    return motivo or None


def resolver_costo_unitario(producto: Producto, costo_unitario: Decimal | None = None) -> Decimal | None:
    """
    Costo de una línea de ingreso: el explícito si vino; si no, el
    precio_compra del producto cuando es > 0.
    """
    if costo_unitario is not None:
        return Decimal(costo_unitario)
    return _precio(producto.precio_compra)


def cajas_a_unidades(producto: Producto, cajas) -> Decimal:
    """
    Convierte cajas a unidades usando unidades_por_caja.
    """
    try:
        cajas = Decimal(str(cajas))
    except (InvalidOperation, ValueError):
        raise MovimientoInvalidoError("La cantidad de cajas debe ser numérica.")

    if cajas < 0:
        raise MovimientoInvalidoError("La cantidad de cajas no puede ser negativa.")

    if not producto.tiene_caja:
        raise MovimientoInvalidoError(
            f"El producto '{producto.nombre}' no tiene unidades por caja configuradas."
        )
    return cajas * producto.unidades_por_caja


def desglose_cajas(producto: Producto, cantidad) -> tuple[int, Decimal] | None:
    """
    Expresa una cantidad en unidades como (cajas completas, unidades sueltas).
    None si el producto no maneja cajas.
    """
    if not producto.tiene_caja:
        return None
    cantidad = Decimal(cantidad or 0)
    if cantidad <= 0:
        return 0, CERO
    por_caja = Decimal(producto.unidades_por_caja)
    cajas = int(cantidad // por_caja)
    sueltas = cantidad - cajas * por_caja
    return cajas, sueltas
