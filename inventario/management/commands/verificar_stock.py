from django.core.management.base import BaseCommand, CommandError

from inventario.models import Bodega
from inventario.services.stock import verificar_consistencia_stock


class Command(BaseCommand):
    help = "Compara el stock de cada producto/bodega con la suma de sus movimientos."

    def add_arguments(self, parser):
        parser.add_argument(
            "--bodega",
            type=int,
            help="Id de la bodega a verificar (por defecto todas).",
        )

    def handle(self, *args, **options):
        bodega = None
        if options.get("bodega") is not None:
            try:
                bodega = Bodega.objects.get(pk=options["bodega"])
            except Bodega.DoesNotExist:
                raise CommandError(f"No existe bodega con id {options['bodega']}.")

        inconsistencias = verificar_consistencia_stock(bodega=bodega)
        if not inconsistencias:
            self.stdout.write(self.style.SUCCESS("Stock consistente con los movimientos."))
            return

        for item in inconsistencias:
            self.stdout.write(
                f"producto={item.producto_id} bodega={item.bodega_id} "
                f"stock={item.cantidad_stock} movimientos={item.cantidad_movimientos} "
                f"diferencia={item.diferencia}"
            )
        raise CommandError(f"{len(inconsistencias)} inconsistencias de stock encontradas.")
