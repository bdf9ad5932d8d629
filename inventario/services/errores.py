from decimal import Decimal


class MovimientoInventarioError(Exception):
    """Errores de dominio al registrar movimientos de inventario."""
    pass


class MovimientoInvalidoError(MovimientoInventarioError):
    """
    Datos del movimiento inválidos: falta la bodega, no hay líneas válidas,
    cantidad negativa, o un producto/cliente/proveedor/bodega que no existe.
    """
    pass


class PrecioTipoInvalidoError(MovimientoInvalidoError):
    pass


class StockInsuficienteError(MovimientoInventarioError):
    """
    El despacho dejaría stock negativo en la bodega. Se revierte todo el
    movimiento.
    """

    def __init__(self, *, producto, bodega, disponible: Decimal, solicitado: Decimal):
        self.producto = producto
        self.bodega = bodega
        self.disponible = disponible
        self.solicitado = solicitado
        super().__init__(
            f"Stock insuficiente de '{producto.nombre}' en la bodega '{bodega.nombre}'. "
            f"Disponible {disponible}, solicitado {solicitado}."
        )
