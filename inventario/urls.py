from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    UnidadMedidaViewSet,
    CategoriaViewSet,
    ProveedorViewSet,
    ClienteViewSet,
    BodegaViewSet,
    ProductoViewSet,
    StockViewSet,
    MovimientoViewSet,
)

router = DefaultRouter()
router.register(r"unidades-medida", UnidadMedidaViewSet, basename="unidad-medida")
router.register(r"categorias", CategoriaViewSet, basename="categoria")
router.register(r"proveedores", ProveedorViewSet, basename="proveedor")
router.register(r"clientes", ClienteViewSet, basename="cliente")
router.register(r"bodegas", BodegaViewSet, basename="bodega")
router.register(r"productos", ProductoViewSet, basename="producto")
router.register(r"stock", StockViewSet, basename="stock")
router.register(r"movimientos", MovimientoViewSet, basename="movimiento")


urlpatterns = [
    path("", include(router.urls)),
]
