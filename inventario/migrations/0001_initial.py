from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion

import inventario.validators


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="UnidadMedida",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("codigo", models.CharField(max_length=10, unique=True)),
                ("nombre", models.CharField(max_length=50)),
            ],
            options={
                "verbose_name": "Unidad de medida",
                "verbose_name_plural": "Unidades de medida",
                "ordering": ["codigo"],
            },
        ),
        migrations.CreateModel(
            name="Categoria",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("nombre", models.CharField(max_length=100, unique=True)),
                ("descripcion", models.TextField(blank=True)),
                ("activo", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Categoría",
                "verbose_name_plural": "Categorías",
                "ordering": ["nombre"],
            },
        ),
        migrations.CreateModel(
            name="Proveedor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("identificacion", models.CharField(blank=True, help_text="Cédula (10 dígitos) o RUC (13 dígitos).", max_length=13, validators=[inventario.validators.validar_identificacion])),
                ("nombre", models.CharField(max_length=150)),
                ("telefono", models.CharField(blank=True, max_length=30)),
                ("correo", models.EmailField(blank=True, max_length=254)),
                ("direccion", models.TextField(blank=True)),
                ("activo", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Proveedor",
                "verbose_name_plural": "Proveedores",
                "ordering": ["nombre"],
            },
        ),
        migrations.CreateModel(
            name="Cliente",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("identificacion", models.CharField(blank=True, help_text="Cédula (10 dígitos) o RUC (13 dígitos).", max_length=13, validators=[inventario.validators.validar_identificacion])),
                ("nombre", models.CharField(max_length=150)),
                ("telefono", models.CharField(blank=True, max_length=30)),
                ("correo", models.EmailField(blank=True, max_length=254)),
                ("activo", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Cliente",
                "verbose_name_plural": "Clientes",
                "ordering": ["nombre"],
            },
        ),
        migrations.CreateModel(
            name="Bodega",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("nombre", models.CharField(max_length=100)),
                ("direccion", models.CharField(blank=True, max_length=255)),
                ("activo", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Bodega",
                "verbose_name_plural": "Bodegas",
                "ordering": ["nombre"],
            },
        ),
        migrations.CreateModel(
            name="Producto",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sku", models.CharField(max_length=50, unique=True)),
                ("nombre", models.CharField(max_length=150)),
                ("precio_compra", models.DecimalField(decimal_places=4, default=0, help_text="Costo de compra por unidad.", max_digits=12)),
                ("precio_venta", models.DecimalField(decimal_places=4, default=0, help_text="Precio de venta al público por unidad.", max_digits=12)),
                ("precio_mayorista", models.DecimalField(decimal_places=4, default=0, help_text="Precio por unidad para ventas al por mayor.", max_digits=12)),
                ("precio_caja", models.DecimalField(decimal_places=4, default=0, help_text="Precio por unidad cuando se vende por caja.", max_digits=12)),
                ("unidades_por_caja", models.PositiveIntegerField(blank=True, help_text="Unidades contenidas en una caja. Obligatorio si hay precio por caja.", null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ("activo", models.BooleanField(default=True)),
                ("categoria", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="productos", to="inventario.categoria")),
                ("proveedor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="productos", to="inventario.proveedor")),
                ("unidad", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="productos", to="inventario.unidadmedida")),
            ],
            options={
                "ordering": ["nombre"],
            },
        ),
        migrations.CreateModel(
            name="Movimiento",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tipo", models.CharField(choices=[("INGRESO", "Ingreso"), ("DESPACHO", "Despacho")], max_length=10)),
                ("fecha", models.DateTimeField(help_text="Fecha efectiva del movimiento (puede diferir de la creación del registro).")),
                ("observacion", models.TextField(blank=True)),
                ("bodega", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="movimientos", to="inventario.bodega")),
                ("cliente", models.ForeignKey(blank=True, help_text="Solo aplica a despachos.", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="movimientos", to="inventario.cliente")),
                ("proveedor", models.ForeignKey(blank=True, help_text="Solo aplica a ingresos.", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="movimientos", to="inventario.proveedor")),
                ("usuario", models.ForeignKey(blank=True, help_text="Usuario que registró el movimiento.", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="movimientos_inventario", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Movimiento",
                "verbose_name_plural": "Movimientos",
                "ordering": ["-fecha", "-id"],
            },
        ),
        migrations.CreateModel(
            name="MovimientoDetalle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("cantidad", models.DecimalField(decimal_places=3, help_text="Cantidad en unidades, siempre positiva.", max_digits=14)),
                ("costo_unitario", models.DecimalField(blank=True, decimal_places=4, help_text="Solo ingresos.", max_digits=12, null=True)),
                ("precio_unitario", models.DecimalField(blank=True, decimal_places=4, help_text="Solo despachos.", max_digits=12, null=True)),
                ("precio_tipo", models.CharField(blank=True, choices=[("NORMAL", "Precio normal"), ("MAYORISTA", "Precio mayorista"), ("CAJA", "Precio por caja"), ("DESCUENTO", "Descuento manual")], max_length=10, null=True)),
                ("motivo_descuento", models.CharField(blank=True, help_text="Solo cuando precio_tipo es DESCUENTO.", max_length=255, null=True)),
                ("movimiento", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="detalles", to="inventario.movimiento")),
                ("producto", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="detalles_movimiento", to="inventario.producto")),
            ],
            options={
                "verbose_name": "Detalle de movimiento",
                "verbose_name_plural": "Detalles de movimiento",
                "ordering": ["movimiento", "id"],
            },
        ),
        migrations.CreateModel(
            name="Stock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("cantidad", models.DecimalField(decimal_places=3, default=0, help_text="Cantidad disponible en unidades.", max_digits=14)),
                ("bodega", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="stocks", to="inventario.bodega")),
                ("producto", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="stocks", to="inventario.producto")),
            ],
            options={
                "verbose_name": "Stock",
                "verbose_name_plural": "Stocks",
                "ordering": ["producto", "bodega"],
                "unique_together": {("producto", "bodega")},
            },
        ),
    ]
