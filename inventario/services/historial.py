# inventario/services/historial.py

from inventario.models import MovimientoDetalle, TipoMovimiento
from inventario.services.errores import MovimientoInvalidoError


def _nombre(obj):
    return obj.nombre if obj is not None else None


def _usuario(usuario):
    if usuario is None:
        return None
    return usuario.get_full_name() or usuario.get_username()


def listar_movimientos(tipo: str | None = None) -> list[dict]:
    """
    Historial de movimientos aplanado: una fila por línea, con los datos de
    la cabecera repetidos. Orden: fecha desc, id de movimiento desc, y las
    líneas en el orden en que se registraron.

    Solo lectura. Proveedor/cliente/usuario ausentes quedan en None.
    """
    qs = MovimientoDetalle.objects.select_related(
        "movimiento",
        "movimiento__bodega",
        "movimiento__proveedor",
        "movimiento__cliente",
        "movimiento__usuario",
        "producto",
    )

    if tipo:
        tipo = str(tipo).strip().upper()
        if tipo not in TipoMovimiento.values:
            raise MovimientoInvalidoError(f"Tipo de movimiento inválido: {tipo}.")
        qs = qs.filter(movimiento__tipo=tipo)

    qs = qs.order_by("-movimiento__fecha", "-movimiento_id", "id")

    filas = []
    for detalle in qs:
        mov = detalle.movimiento
        filas.append(
            {
                "id": mov.id,
                "fecha": mov.fecha,
                "tipo": mov.tipo,
                "bodega": mov.bodega.nombre,
                "proveedor": _nombre(mov.proveedor),
                "cliente": _nombre(mov.cliente),
                "usuario": _usuario(mov.usuario),
                "observacion": mov.observacion or None,
                "detalle_id": detalle.id,
                "producto_id": detalle.producto_id,
                "sku": detalle.producto.sku,
                "producto": detalle.producto.nombre,
                "cantidad": detalle.cantidad,
                "costo_unitario": detalle.costo_unitario,
                "precio_unitario": detalle.precio_unitario,
                "precio_tipo": detalle.precio_tipo,
                "motivo_descuento": detalle.motivo_descuento,
            }
        )
    return filas
