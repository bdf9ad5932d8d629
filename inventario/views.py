import logging

from django.db import DatabaseError
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import (
    UnidadMedida,
    Categoria,
    Proveedor,
    Cliente,
    Bodega,
    Producto,
    Stock,
)
from .serializers import (
    UnidadMedidaSerializer,
    CategoriaSerializer,
    ProveedorSerializer,
    ClienteSerializer,
    BodegaSerializer,
    ProductoSerializer,
    StockSerializer,
    IngresoSerializer,
    DespachoSerializer,
    FiltroMovimientosSerializer,
    FilaMovimientoSerializer,
)
from .services.catalogo import (
    desactivar,
    reactivar,
    eliminar_bodega_definitivamente,
    eliminar_producto_definitivamente,
)
from .services.errores import MovimientoInvalidoError, StockInsuficienteError
from .services.historial import listar_movimientos
from .services.movimientos import registrar_despacho, registrar_ingreso
from .services.stock import desglose_stock, obtener_stock

logger = logging.getLogger(__name__)


class IsAuthenticatedOrReadOnly(permissions.IsAuthenticatedOrReadOnly):
    """
    Lectura libre; registrar movimientos o tocar el catálogo exige sesión.
    """
    pass


class CatalogoViewSet(viewsets.ModelViewSet):
    """
    CRUD de catálogo con baja lógica:
    - El listado muestra solo activos; /inactivos/ lista los dados de baja.
    - DELETE marca activo=False en vez de borrar.
    - POST /<id>/reactivar/ vuelve a activarlo.
    """
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action == "list":
            qs = qs.filter(activo=True)
        return qs

    def perform_destroy(self, instance):
        desactivar(instance)

    @action(detail=False, methods=["get"], url_path="inactivos")
    def inactivos(self, request):
        qs = self.queryset.model.objects.filter(activo=False)
        serializer = self.get_serializer(qs, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=["post"], url_path="reactivar", url_name="reactivar")
    def reactivar_registro(self, request, pk=None):
        instancia = reactivar(self.get_object())
        return Response(self.get_serializer(instancia).data)


class UnidadMedidaViewSet(viewsets.ModelViewSet):
    queryset = UnidadMedida.objects.all()
    serializer_class = UnidadMedidaSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]


class CategoriaViewSet(CatalogoViewSet):
    queryset = Categoria.objects.all()
    serializer_class = CategoriaSerializer


class ProveedorViewSet(CatalogoViewSet):
    queryset = Proveedor.objects.all()
    serializer_class = ProveedorSerializer


class ClienteViewSet(CatalogoViewSet):
    queryset = Cliente.objects.all()
    serializer_class = ClienteSerializer


class BodegaViewSet(CatalogoViewSet):
    queryset = Bodega.objects.all()
    serializer_class = BodegaSerializer

    @action(detail=True, methods=["delete"], url_path="definitivo", url_name="definitivo")
    def eliminar_definitivo(self, request, pk=None):
        """
        Borrado físico: elimina también los movimientos y el stock de la bodega.
        DELETE /api/bodegas/<id>/definitivo/
        """
        eliminar_bodega_definitivamente(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductoViewSet(CatalogoViewSet):
    queryset = Producto.objects.all().select_related("categoria", "proveedor", "unidad")
    serializer_class = ProductoSerializer

    @action(detail=True, methods=["get"], url_path="stock")
    def stock(self, request, pk=None):
        """
        Stock total del producto y su desglose por bodega.
        GET /api/productos/<id>/stock/?bodega=<id>
        """
        producto = self.get_object()
        bodega_id = request.query_params.get("bodega")
        if bodega_id is not None and not bodega_id.isdigit():
            return Response(
                {"message": "El parámetro bodega debe ser un id numérico."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            {
                "producto": producto.id,
                "sku": producto.sku,
                "bodega": int(bodega_id) if bodega_id is not None else None,
                "stock": obtener_stock(producto_id=producto.id, bodega_id=bodega_id),
                "unidades_por_caja": producto.unidades_por_caja,
                "bodegas": desglose_stock(producto_id=producto.id),
            }
        )

    @action(detail=True, methods=["delete"], url_path="definitivo", url_name="definitivo")
    def eliminar_definitivo(self, request, pk=None):
        """
        Borrado físico: elimina sus líneas de movimiento y su stock.
        DELETE /api/productos/<id>/definitivo/
        """
        eliminar_producto_definitivamente(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)


class StockViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = StockSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get_queryset(self):
        qs = Stock.objects.select_related("producto", "bodega")
        bodega = self.request.query_params.get("bodega")
        producto = self.request.query_params.get("producto")
        if bodega and bodega.isdigit():
            qs = qs.filter(bodega_id=bodega)
        if producto and producto.isdigit():
            qs = qs.filter(producto_id=producto)
        return qs


class MovimientoViewSet(viewsets.ViewSet):
    """
    GET  /api/movimientos/?tipo=INGRESO|DESPACHO
    POST /api/movimientos/ingresos/
    POST /api/movimientos/despachos/
    """
    permission_classes = [IsAuthenticatedOrReadOnly]

    def list(self, request):
        filtro = FiltroMovimientosSerializer(data=request.query_params)
        filtro.is_valid(raise_exception=True)
        filas = listar_movimientos(filtro.validated_data.get("tipo"))
        return Response(FilaMovimientoSerializer(filas, many=True).data)

    def _registrar(self, request, serializer_class, registrar, contraparte, mensaje_ok, mensaje_error):
        serializer = serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            movimiento = registrar(
                bodega_id=data.get("bodega_id"),
                detalles=data.get("detalles") or [],
                observacion=data.get("observacion") or "",
                fecha=data.get("fecha"),
                usuario=request.user if request.user.is_authenticated else None,
                **{contraparte: data.get(contraparte)},
            )
        except StockInsuficienteError as exc:
            return Response(
                {
                    "message": str(exc),
                    "code": "stock_insuficiente",
                    "producto_id": exc.producto.id,
                    "bodega_id": exc.bodega.id,
                    "disponible": str(exc.disponible),
                    "solicitado": str(exc.solicitado),
                },
                status=status.HTTP_409_CONFLICT,
            )
        except MovimientoInvalidoError as exc:
            return Response(
                {"message": str(exc), "code": "movimiento_invalido"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except DatabaseError:
            logger.exception("Error de base de datos en %s", request.path)
            return Response(
                {"message": mensaje_error},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(
            {"id": movimiento.id, "message": mensaje_ok},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["post"], url_path="ingresos")
    def ingresos(self, request):
        return self._registrar(
            request,
            IngresoSerializer,
            registrar_ingreso,
            "proveedor_id",
            "Ingreso registrado",
            "Error al registrar ingreso",
        )

    @action(detail=False, methods=["post"], url_path="despachos")
    def despachos(self, request):
        return self._registrar(
            request,
            DespachoSerializer,
            registrar_despacho,
            "cliente_id",
            "Despacho registrado",
            "Error al registrar despacho",
        )
