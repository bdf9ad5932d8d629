from django.apps import AppConfig


class InventarioConfig(AppConfig):
    """
    Inventario multi-bodega: catálogo, ingresos/despachos y stock por bodega.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "inventario"
    verbose_name = "Inventario"
