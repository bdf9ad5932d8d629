from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from .validators import validar_identificacion


class TimeStampedModel(models.Model):
    """
    Modelo base abstracto con timestamps estándar.
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UnidadMedida(TimeStampedModel):
    """
    Ejemplos: codigo "UND" (unidad), "KG" (kilogramo), "LT" (litro).
    """
    codigo = models.CharField(max_length=10, unique=True)
    nombre = models.CharField(max_length=50)

    class Meta:
        verbose_name = "Unidad de medida"
        verbose_name_plural = "Unidades de medida"
        ordering = ["codigo"]

    def __str__(self):
        return f"{self.nombre} ({self.codigo})"


class Categoria(TimeStampedModel):
    nombre = models.CharField(max_length=100, unique=True)
    descripcion = models.TextField(blank=True)
    activo = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Categoría"
        verbose_name_plural = "Categorías"
        ordering = ["nombre"]

    def __str__(self):
        return self.nombre


class Proveedor(TimeStampedModel):
    identificacion = models.CharField(
        max_length=13,
        blank=True,
        validators=[validar_identificacion],
        help_text="Cédula (10 dígitos) o RUC (13 dígitos).",
    )
    nombre = models.CharField(max_length=150)
    telefono = models.CharField(max_length=30, blank=True)
    correo = models.EmailField(blank=True)
    direccion = models.TextField(blank=True)
    activo = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Proveedor"
        verbose_name_plural = "Proveedores"
        ordering = ["nombre"]

    def __str__(self):
        return self.nombre


class Cliente(TimeStampedModel):
    identificacion = models.CharField(
        max_length=13,
        blank=True,
        validators=[validar_identificacion],
        help_text="Cédula (10 dígitos) o RUC (13 dígitos).",
    )
    nombre = models.CharField(max_length=150)
    telefono = models.CharField(max_length=30, blank=True)
    correo = models.EmailField(blank=True)
    activo = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Cliente"
        verbose_name_plural = "Clientes"
        ordering = ["nombre"]

    def __str__(self):
        return self.nombre


class Bodega(TimeStampedModel):
    """
    Bodega física donde se guarda stock. El stock vive en `Stock`, no aquí.
    """
    nombre = models.CharField(max_length=100)
    direccion = models.CharField(max_length=255, blank=True)
    activo = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Bodega"
        verbose_name_plural = "Bodegas"
        ordering = ["nombre"]

    def __str__(self):
        return self.nombre


class Producto(TimeStampedModel):
    """
    Catálogo de productos con sus cuatro precios de referencia.

    `precio_caja` es el precio POR UNIDAD cuando se vende en modo caja,
    no el precio de la caja completa.
    """
    sku = models.CharField(max_length=50, unique=True)
    nombre = models.CharField(max_length=150)
    categoria = models.ForeignKey(
        Categoria,
        on_delete=models.SET_NULL,
        related_name="productos",
        null=True,
        blank=True,
    )
    proveedor = models.ForeignKey(
        Proveedor,
        on_delete=models.SET_NULL,
        related_name="productos",
        null=True,
        blank=True,
    )
    unidad = models.ForeignKey(
        UnidadMedida,
        on_delete=models.SET_NULL,
        related_name="productos",
        null=True,
        blank=True,
    )

    precio_compra = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=0,
        help_text="Costo de compra por unidad.",
    )
    precio_venta = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=0,
        help_text="Precio de venta al público por unidad.",
    )
    precio_mayorista = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=0,
        help_text="Precio por unidad para ventas al por mayor.",
    )
    precio_caja = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=0,
        help_text="Precio por unidad cuando se vende por caja.",
    )
    unidades_por_caja = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text="Unidades contenidas en una caja. Obligatorio si hay precio por caja.",
    )
    activo = models.BooleanField(default=True)

    class Meta:
        ordering = ["nombre"]

    def __str__(self):
        return f"{self.sku} - {self.nombre}"

    def clean(self):
        if (self.precio_caja or Decimal("0")) > 0 and not (self.unidades_por_caja or 0) > 0:
            raise ValidationError({
                "unidades_por_caja": "Debe especificar unidades por caja cuando existe precio por caja."
            })

    @property
    def tiene_caja(self) -> bool:
        return (self.unidades_por_caja or 0) > 0


class TipoMovimiento(models.TextChoices):
    INGRESO = "INGRESO", "Ingreso"
    DESPACHO = "DESPACHO", "Despacho"


class PrecioTipo(models.TextChoices):
    NORMAL = "NORMAL", "Precio normal"
    MAYORISTA = "MAYORISTA", "Precio mayorista"
    CAJA = "CAJA", "Precio por caja"
    DESCUENTO = "DESCUENTO", "Descuento manual"


class Movimiento(TimeStampedModel):
    """
    Cabecera de un movimiento de inventario (ingreso o despacho).
    Es inmutable una vez registrado: las correcciones se hacen con
    movimientos compensatorios.
    """
    tipo = models.CharField(max_length=10, choices=TipoMovimiento.choices)
    fecha = models.DateTimeField(
        help_text="Fecha efectiva del movimiento (puede diferir de la creación del registro).",
    )
    bodega = models.ForeignKey(
        Bodega,
        on_delete=models.PROTECT,
        related_name="movimientos",
    )
    proveedor = models.ForeignKey(
        Proveedor,
        on_delete=models.SET_NULL,
        related_name="movimientos",
        null=True,
        blank=True,
        help_text="Solo aplica a ingresos.",
    )
    cliente = models.ForeignKey(
        Cliente,
        on_delete=models.SET_NULL,
        related_name="movimientos",
        null=True,
        blank=True,
        help_text="Solo aplica a despachos.",
    )
    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="movimientos_inventario",
        null=True,
        blank=True,
        help_text="Usuario que registró el movimiento.",
    )
    observacion = models.TextField(blank=True)

    class Meta:
        verbose_name = "Movimiento"
        verbose_name_plural = "Movimientos"
        ordering = ["-fecha", "-id"]

    def __str__(self):
        return f"{self.tipo} #{self.pk} @ {self.bodega}"


class MovimientoDetalle(models.Model):
    """
    Línea de un movimiento. La cantidad siempre está en unidades.
    """
    movimiento = models.ForeignKey(
        Movimiento,
        on_delete=models.CASCADE,
        related_name="detalles",
    )
    producto = models.ForeignKey(
        Producto,
        on_delete=models.PROTECT,
        related_name="detalles_movimiento",
    )
    cantidad = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        help_text="Cantidad en unidades, siempre positiva.",
    )
    costo_unitario = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="Solo ingresos.",
    )
    precio_unitario = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="Solo despachos.",
    )
    precio_tipo = models.CharField(
        max_length=10,
        choices=PrecioTipo.choices,
        null=True,
        blank=True,
    )
    motivo_descuento = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Solo cuando precio_tipo es DESCUENTO.",
    )

    class Meta:
        verbose_name = "Detalle de movimiento"
        verbose_name_plural = "Detalles de movimiento"
        ordering = ["movimiento", "id"]

    def __str__(self):
        return f"{self.cantidad} x {self.producto} (mov #{self.movimiento_id})"

    @property
    def subtotal(self) -> Decimal | None:
        precio = self.precio_unitario if self.precio_unitario is not None else self.costo_unitario
        if precio is None:
            return None
        return (self.cantidad * precio).quantize(Decimal("0.0001"))


class Stock(TimeStampedModel):
    """
    Stock de un producto en una bodega. Solo lo modifica el registro de
    movimientos; siempre igual a ingresos - despachos para el par.
    """
    producto = models.ForeignKey(
        Producto,
        on_delete=models.PROTECT,
        related_name="stocks",
    )
    bodega = models.ForeignKey(
        Bodega,
        on_delete=models.PROTECT,
        related_name="stocks",
    )
    cantidad = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=0,
        help_text="Cantidad disponible en unidades.",
    )

    class Meta:
        verbose_name = "Stock"
        verbose_name_plural = "Stocks"
        unique_together = ("producto", "bodega")
        ordering = ["producto", "bodega"]

    def __str__(self):
        return f"{self.producto} @ {self.bodega}: {self.cantidad}"
