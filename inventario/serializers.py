from rest_framework import serializers

from .models import (
    UnidadMedida,
    Categoria,
    Proveedor,
    Cliente,
    Bodega,
    Producto,
    Stock,
    PrecioTipo,
    TipoMovimiento,
)
from .services.precios import desglose_cajas


class UnidadMedidaSerializer(serializers.ModelSerializer):
    class Meta:
        model = UnidadMedida
        fields = [
            "id",
            "codigo",
            "nombre",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class CategoriaSerializer(serializers.ModelSerializer):
    class Meta:
        model = Categoria
        fields = [
            "id",
            "nombre",
            "descripcion",
            "activo",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class ProveedorSerializer(serializers.ModelSerializer):
    """
    La identificación (cédula/RUC) se valida con el validador del modelo.
    """

    class Meta:
        model = Proveedor
        fields = [
            "id",
            "identificacion",
            "nombre",
            "telefono",
            "correo",
            "direccion",
            "activo",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_identificacion(self, value):
        return (value or "").strip()


class ClienteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Cliente
        fields = [
            "id",
            "identificacion",
            "nombre",
            "telefono",
            "correo",
            "activo",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_identificacion(self, value):
        return (value or "").strip()


class BodegaSerializer(serializers.ModelSerializer):
    class Meta:
        model = Bodega
        fields = [
            "id",
            "nombre",
            "direccion",
            "activo",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class ProductoSerializer(serializers.ModelSerializer):
    categoria_detalle = CategoriaSerializer(source="categoria", read_only=True)
    proveedor_detalle = ProveedorSerializer(source="proveedor", read_only=True)
    unidad_detalle = UnidadMedidaSerializer(source="unidad", read_only=True)

    class Meta:
        model = Producto
        fields = [
            "id",
            "sku",
            "nombre",
            "categoria",
            "categoria_detalle",
            "proveedor",
            "proveedor_detalle",
            "unidad",
            "unidad_detalle",
            "precio_compra",
            "precio_venta",
            "precio_mayorista",
            "precio_caja",
            "unidades_por_caja",
            "activo",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def _validar_no_negativo(self, value, nombre):
        if value is not None and value < 0:
            raise serializers.ValidationError(f"El {nombre} no puede ser negativo.")
        return value

    def validate_precio_compra(self, value):
        return self._validar_no_negativo(value, "precio de compra")

    def validate_precio_venta(self, value):
        return self._validar_no_negativo(value, "precio de venta")

    def validate_precio_mayorista(self, value):
        return self._validar_no_negativo(value, "precio mayorista")

    def validate_precio_caja(self, value):
        return self._validar_no_negativo(value, "precio por caja")

    def validate(self, attrs):
        precio_caja = attrs.get("precio_caja", getattr(self.instance, "precio_caja", None))
        unidades_por_caja = attrs.get(
            "unidades_por_caja", getattr(self.instance, "unidades_por_caja", None)
        )

        if precio_caja and precio_caja > 0 and not (unidades_por_caja or 0) > 0:
            raise serializers.ValidationError({
                "unidades_por_caja": "Debe especificar unidades por caja cuando existe precio por caja."
            })

        return attrs


class StockSerializer(serializers.ModelSerializer):
    """
    Solo lectura: el stock lo mantiene el registro de movimientos.
    """

    producto_sku = serializers.CharField(source="producto.sku", read_only=True)
    producto_nombre = serializers.CharField(source="producto.nombre", read_only=True)
    bodega_nombre = serializers.CharField(source="bodega.nombre", read_only=True)
    cajas = serializers.SerializerMethodField()
    sueltas = serializers.SerializerMethodField()

    class Meta:
        model = Stock
        fields = [
            "id",
            "producto",
            "producto_sku",
            "producto_nombre",
            "bodega",
            "bodega_nombre",
            "cantidad",
            "cajas",
            "sueltas",
            "updated_at",
        ]
        read_only_fields = fields

    def get_cajas(self, obj):
        desglose = desglose_cajas(obj.producto, obj.cantidad)
        return desglose[0] if desglose else None

    def get_sueltas(self, obj):
        desglose = desglose_cajas(obj.producto, obj.cantidad)
        return desglose[1] if desglose else None


# ---------------------------------------------------------------------------
# Movimientos
# ---------------------------------------------------------------------------

class DetalleIngresoSerializer(serializers.Serializer):
    """
    Las líneas sin producto o con cantidad 0 se aceptan aquí y las descarta
    el servicio; la validación de negocio vive en services.movimientos.
    """
    producto_id = serializers.IntegerField(required=False, allow_null=True)
    cantidad = serializers.DecimalField(max_digits=14, decimal_places=3, required=False, allow_null=True)
    costo_unitario = serializers.DecimalField(max_digits=12, decimal_places=4, required=False, allow_null=True)


class DetalleDespachoSerializer(serializers.Serializer):
    producto_id = serializers.IntegerField(required=False, allow_null=True)
    cantidad = serializers.DecimalField(max_digits=14, decimal_places=3, required=False, allow_null=True)
    cajas = serializers.DecimalField(max_digits=14, decimal_places=3, required=False, allow_null=True)
    precio_unitario = serializers.DecimalField(max_digits=12, decimal_places=4, required=False, allow_null=True)
    # Lo normaliza services.precios (acepta minúsculas; vacío = NORMAL)
    precio_tipo = serializers.CharField(
        max_length=20,
        required=False,
        allow_null=True,
        allow_blank=True,
        default=PrecioTipo.NORMAL,
    )
    motivo_descuento = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)


class IngresoSerializer(serializers.Serializer):
    bodega_id = serializers.IntegerField(required=False, allow_null=True)
    proveedor_id = serializers.IntegerField(required=False, allow_null=True)
    fecha = serializers.DateTimeField(required=False, allow_null=True)
    observacion = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    detalles = DetalleIngresoSerializer(many=True, required=False)


class DespachoSerializer(serializers.Serializer):
    bodega_id = serializers.IntegerField(required=False, allow_null=True)
    cliente_id = serializers.IntegerField(required=False, allow_null=True)
    fecha = serializers.DateTimeField(required=False, allow_null=True)
    observacion = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    detalles = DetalleDespachoSerializer(many=True, required=False)


class FiltroMovimientosSerializer(serializers.Serializer):
    tipo = serializers.ChoiceField(choices=TipoMovimiento.choices, required=False)


class FilaMovimientoSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    fecha = serializers.DateTimeField()
    tipo = serializers.CharField()
    bodega = serializers.CharField()
    proveedor = serializers.CharField(allow_null=True)
    cliente = serializers.CharField(allow_null=True)
    usuario = serializers.CharField(allow_null=True)
    observacion = serializers.CharField(allow_null=True)
    detalle_id = serializers.IntegerField()
    producto_id = serializers.IntegerField()
    sku = serializers.CharField()
    producto = serializers.CharField()
    cantidad = serializers.DecimalField(max_digits=14, decimal_places=3)
    costo_unitario = serializers.DecimalField(max_digits=12, decimal_places=4, allow_null=True)
    precio_unitario = serializers.DecimalField(max_digits=12, decimal_places=4, allow_null=True)
    precio_tipo = serializers.CharField(allow_null=True)
    motivo_descuento = serializers.CharField(allow_null=True)
