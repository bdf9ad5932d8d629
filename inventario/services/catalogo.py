# inventario/services/catalogo.py

import logging

from django.db import transaction
from django.db.models import Count

from inventario.models import Bodega, Movimiento, MovimientoDetalle, Producto, Stock

logger = logging.getLogger(__name__)


def desactivar(instancia):
    """Baja lógica: los movimientos que la referencian siguen intactos."""
    instancia.activo = False
    instancia.save(update_fields=["activo", "updated_at"])
    return instancia


def reactivar(instancia):
    instancia.activo = True
    instancia.save(update_fields=["activo", "updated_at"])
    return instancia


@transaction.atomic
def eliminar_bodega_definitivamente(bodega: Bodega) -> None:
    """
    Borrado físico de una bodega junto con sus movimientos (cabecera y
    líneas) y su stock. No se puede deshacer.
    """
    movimientos = Movimiento.objects.filter(bodega=bodega)
    detalles_borrados, _ = MovimientoDetalle.objects.filter(movimiento__in=movimientos).delete()
    movimientos_borrados, _ = movimientos.delete()
    Stock.objects.filter(bodega=bodega).delete()

    logger.warning(
        "Bodega #%s '%s' eliminada definitivamente (%s movimientos, %s líneas)",
        bodega.pk,
        bodega.nombre,
        movimientos_borrados,
        detalles_borrados,
    )
    bodega.delete()


@transaction.atomic
def eliminar_producto_definitivamente(producto: Producto) -> None:
    """
    Borrado físico de un producto: elimina sus líneas de movimiento, las
    cabeceras que quedan sin líneas y su stock en todas las bodegas.
    """
    movimiento_ids = set(
        MovimientoDetalle.objects.filter(producto=producto)
        .order_by()
        .values_list("movimiento_id", flat=True)
    )
    detalles_borrados, _ = MovimientoDetalle.objects.filter(producto=producto).delete()

    vacios = list(
        Movimiento.objects.filter(pk__in=movimiento_ids)
        .annotate(num_detalles=Count("detalles"))
        .filter(num_detalles=0)
        .values_list("pk", flat=True)
    )
    Movimiento.objects.filter(pk__in=vacios).delete()
    Stock.objects.filter(producto=producto).delete()

    logger.warning(
        "Producto #%s '%s' eliminado definitivamente (%s líneas de movimiento)",
        producto.pk,
        producto.sku,
        detalles_borrados,
    )
    producto.delete()
