from django.contrib import admin

from .models import (
    UnidadMedida,
    Categoria,
    Proveedor,
    Cliente,
    Bodega,
    Producto,
    Movimiento,
    MovimientoDetalle,
    Stock,
)


admin.site.site_header = "Administración de Inventario"
admin.site.site_title = "Inventario"


@admin.register(UnidadMedida)
class UnidadMedidaAdmin(admin.ModelAdmin):
    list_display = ("codigo", "nombre", "created_at")
    search_fields = ("codigo", "nombre")


@admin.register(Categoria)
class CategoriaAdmin(admin.ModelAdmin):
    list_display = ("nombre", "activo", "created_at")
    list_filter = ("activo",)
    search_fields = ("nombre",)


@admin.register(Proveedor)
class ProveedorAdmin(admin.ModelAdmin):
    list_display = ("nombre", "identificacion", "correo", "telefono", "activo")
    list_filter = ("activo",)
    search_fields = ("nombre", "identificacion", "correo", "telefono")


@admin.register(Cliente)
class ClienteAdmin(admin.ModelAdmin):
    list_display = ("nombre", "identificacion", "correo", "telefono", "activo")
    list_filter = ("activo",)
    search_fields = ("nombre", "identificacion", "correo", "telefono")


@admin.register(Bodega)
class BodegaAdmin(admin.ModelAdmin):
    list_display = ("nombre", "direccion", "activo", "created_at")
    list_filter = ("activo",)
    search_fields = ("nombre", "direccion")


@admin.register(Producto)
class ProductoAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "nombre",
        "categoria",
        "proveedor",
        "precio_venta",
        "precio_mayorista",
        "precio_caja",
        "unidades_por_caja",
        "activo",
    )
    list_filter = ("activo", "categoria", "proveedor")
    search_fields = ("sku", "nombre")
    autocomplete_fields = ("categoria", "proveedor", "unidad")


class SoloLecturaAdminMixin:
    """
    El ledger y el stock solo se escriben desde services.movimientos.
    """

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class MovimientoDetalleInline(SoloLecturaAdminMixin, admin.TabularInline):
    model = MovimientoDetalle
    extra = 0
    fields = (
        "producto",
        "cantidad",
        "costo_unitario",
        "precio_unitario",
        "precio_tipo",
        "motivo_descuento",
    )


@admin.register(Movimiento)
class MovimientoAdmin(SoloLecturaAdminMixin, admin.ModelAdmin):
    list_display = ("id", "tipo", "fecha", "bodega", "proveedor", "cliente", "usuario")
    list_filter = ("tipo", "bodega", "fecha")
    search_fields = ("observacion", "bodega__nombre", "proveedor__nombre", "cliente__nombre")
    date_hierarchy = "fecha"
    inlines = [MovimientoDetalleInline]


@admin.register(Stock)
class StockAdmin(SoloLecturaAdminMixin, admin.ModelAdmin):
    list_display = ("producto", "bodega", "cantidad", "updated_at")
    list_filter = ("bodega",)
    search_fields = ("producto__sku", "producto__nombre", "bodega__nombre")
