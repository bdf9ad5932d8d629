from decimal import Decimal
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from inventario.models import (
    Bodega,
    Cliente,
    Movimiento,
    MovimientoDetalle,
    PrecioTipo,
    Producto,
    Proveedor,
    Stock,
    TipoMovimiento,
)
from inventario.services.errores import (
    MovimientoInvalidoError,
    PrecioTipoInvalidoError,
    StockInsuficienteError,
)
from inventario.services.movimientos import (
    registrar_despacho,
    registrar_ingreso,
    registrar_movimiento,
)
from inventario.services.stock import obtener_stock, verificar_consistencia_stock

User = get_user_model()


class MovimientosBaseTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username="bodeguero",
            password="password123",
        )
        self.bodega = Bodega.objects.create(nombre="Bodega Principal", direccion="Quito")
        self.otra_bodega = Bodega.objects.create(nombre="Bodega Norte")
        self.proveedor = Proveedor.objects.create(nombre="Distribuidora Andina")
        self.cliente = Cliente.objects.create(nombre="Tienda La Esquina")

        self.producto = Producto.objects.create(
            sku="GAL-001",
            nombre="Galletas",
            precio_compra=Decimal("5.00"),
            precio_venta=Decimal("9.99"),
            precio_mayorista=Decimal("8.90"),
            precio_caja=Decimal("8.50"),
            unidades_por_caja=12,
        )
        self.sin_caja = Producto.objects.create(
            sku="ARR-001",
            nombre="Arroz",
            precio_venta=Decimal("1.20"),
        )

    def stock(self, producto=None, bodega=None):
        return obtener_stock(
            producto_id=(producto or self.producto).id,
            bodega_id=(bodega or self.bodega).id,
        )

    def ingresar(self, cantidad, producto=None, bodega=None, **kwargs):
        return registrar_ingreso(
            bodega_id=(bodega or self.bodega).id,
            detalles=[{"producto_id": (producto or self.producto).id, "cantidad": cantidad}],
            **kwargs,
        )


class RegistrarIngresoTests(MovimientosBaseTestCase):
    def test_ingreso_en_bodega_vacia(self):
        self.assertFalse(
            Stock.objects.filter(producto=self.producto, bodega=self.bodega).exists()
        )

        movimiento = registrar_ingreso(
            bodega_id=self.bodega.id,
            proveedor_id=self.proveedor.id,
            detalles=[{"producto_id": self.producto.id, "cantidad": 100, "costo_unitario": 5}],
            usuario=self.user,
            observacion="  Compra inicial ",
        )

        self.assertEqual(self.stock(), Decimal("100"))
        self.assertEqual(movimiento.tipo, TipoMovimiento.INGRESO)
        self.assertEqual(movimiento.proveedor, self.proveedor)
        self.assertEqual(movimiento.usuario, self.user)
        self.assertEqual(movimiento.observacion, "Compra inicial")

        detalle = movimiento.detalles.get()
        self.assertEqual(detalle.cantidad, Decimal("100"))
        self.assertEqual(detalle.costo_unitario, Decimal("5"))
        self.assertIsNone(detalle.precio_unitario)
        self.assertIsNone(detalle.precio_tipo)

    def test_costo_por_defecto_es_precio_compra(self):
        movimiento = self.ingresar(10)
        self.assertEqual(movimiento.detalles.get().costo_unitario, Decimal("5.00"))

    def test_costo_queda_nulo_sin_precio_compra(self):
        movimiento = self.ingresar(10, producto=self.sin_caja)
        self.assertIsNone(movimiento.detalles.get().costo_unitario)

    def test_fecha_explicita(self):
        ayer = timezone.now() - timedelta(days=1)
        movimiento = self.ingresar(1, fecha=ayer)
        self.assertEqual(movimiento.fecha, ayer)

    def test_varias_lineas_mismo_producto_se_suman(self):
        registrar_ingreso(
            bodega_id=self.bodega.id,
            detalles=[
                {"producto_id": self.producto.id, "cantidad": 3},
                {"producto_id": self.producto.id, "cantidad": "4.5"},
            ],
        )
        self.assertEqual(self.stock(), Decimal("7.5"))
        self.assertEqual(MovimientoDetalle.objects.count(), 2)

    def test_stock_es_por_bodega(self):
        self.ingresar(10)
        self.ingresar(4, bodega=self.otra_bodega)

        self.assertEqual(self.stock(), Decimal("10"))
        self.assertEqual(self.stock(bodega=self.otra_bodega), Decimal("4"))
        self.assertEqual(obtener_stock(producto_id=self.producto.id), Decimal("14"))


class RegistrarDespachoTests(MovimientosBaseTestCase):
    def setUp(self):
        super().setUp()
        self.ingresar(100)

    def test_despacho_precio_normal(self):
        movimiento = registrar_despacho(
            bodega_id=self.bodega.id,
            cliente_id=self.cliente.id,
            detalles=[
                {"producto_id": self.producto.id, "cantidad": 30, "precio_tipo": PrecioTipo.NORMAL}
            ],
        )

        self.assertEqual(self.stock(), Decimal("70"))
        detalle = movimiento.detalles.get()
        self.assertEqual(detalle.precio_unitario, Decimal("9.99"))
        self.assertEqual(detalle.precio_tipo, PrecioTipo.NORMAL)
        self.assertIsNone(detalle.costo_unitario)
        self.assertEqual(movimiento.cliente, self.cliente)

    def test_despacho_sin_stock_suficiente_no_cambia_nada(self):
        registrar_despacho(
            bodega_id=self.bodega.id,
            detalles=[{"producto_id": self.producto.id, "cantidad": 30}],
        )
        movimientos_antes = Movimiento.objects.count()

        with self.assertRaises(StockInsuficienteError) as ctx:
            registrar_despacho(
                bodega_id=self.bodega.id,
                detalles=[{"producto_id": self.producto.id, "cantidad": 1000}],
            )

        self.assertEqual(self.stock(), Decimal("70"))
        self.assertEqual(Movimiento.objects.count(), movimientos_antes)
        self.assertEqual(ctx.exception.producto, self.producto)
        self.assertEqual(ctx.exception.disponible, Decimal("70"))
        self.assertEqual(ctx.exception.solicitado, Decimal("1000"))

    def test_despacho_precio_caja_registra_unidades(self):
        movimiento = registrar_despacho(
            bodega_id=self.bodega.id,
            detalles=[{"producto_id": self.producto.id, "cantidad": 5, "precio_tipo": "CAJA"}],
        )

        detalle = movimiento.detalles.get()
        self.assertEqual(detalle.precio_unitario, Decimal("8.50"))
        self.assertEqual(detalle.cantidad, Decimal("5"))
        self.assertEqual(self.stock(), Decimal("95"))

    def test_despacho_en_cajas_convierte_a_unidades(self):
        movimiento = registrar_despacho(
            bodega_id=self.bodega.id,
            detalles=[
                {"producto_id": self.producto.id, "cajas": 2, "cantidad": 3, "precio_tipo": "CAJA"}
            ],
        )

        self.assertEqual(movimiento.detalles.get().cantidad, Decimal("27"))
        self.assertEqual(self.stock(), Decimal("73"))

    def test_cajas_en_producto_sin_caja_es_invalido(self):
        self.ingresar(10, producto=self.sin_caja)
        with self.assertRaises(MovimientoInvalidoError):
            registrar_despacho(
                bodega_id=self.bodega.id,
                detalles=[{"producto_id": self.sin_caja.id, "cajas": 1}],
            )
        self.assertEqual(self.stock(producto=self.sin_caja), Decimal("10"))

    def test_precio_caja_sin_configuracion_guarda_cero(self):
        self.ingresar(10, producto=self.sin_caja)
        movimiento = registrar_despacho(
            bodega_id=self.bodega.id,
            detalles=[{"producto_id": self.sin_caja.id, "cantidad": 2, "precio_tipo": "CAJA"}],
        )
        self.assertEqual(movimiento.detalles.get().precio_unitario, Decimal("0"))

    def test_descuento_guarda_precio_y_motivo(self):
        movimiento = registrar_despacho(
            bodega_id=self.bodega.id,
            detalles=[
                {
                    "producto_id": self.producto.id,
                    "cantidad": 1,
                    "precio_tipo": "DESCUENTO",
                    "precio_unitario": "7.00",
                    "motivo_descuento": "Producto con empaque dañado",
                }
            ],
        )
        detalle = movimiento.detalles.get()
        self.assertEqual(detalle.precio_unitario, Decimal("7.00"))
        self.assertEqual(detalle.motivo_descuento, "Producto con empaque dañado")

    def test_motivo_se_descarta_fuera_de_descuento(self):
        movimiento = registrar_despacho(
            bodega_id=self.bodega.id,
            detalles=[
                {
                    "producto_id": self.producto.id,
                    "cantidad": 1,
                    "precio_tipo": "MAYORISTA",
                    "precio_unitario": "1.00",
                    "motivo_descuento": "no aplica",
                }
            ],
        )
        detalle = movimiento.detalles.get()
        self.assertEqual(detalle.precio_unitario, Decimal("8.90"))
        self.assertIsNone(detalle.motivo_descuento)

    def test_precio_tipo_desconocido(self):
        with self.assertRaises(PrecioTipoInvalidoError):
            registrar_despacho(
                bodega_id=self.bodega.id,
                detalles=[{"producto_id": self.producto.id, "cantidad": 1, "precio_tipo": "PROMO"}],
            )

    def test_despacho_varias_lineas_excede_en_conjunto(self):
        with self.assertRaises(StockInsuficienteError):
            registrar_despacho(
                bodega_id=self.bodega.id,
                detalles=[
                    {"producto_id": self.producto.id, "cantidad": 60},
                    {"producto_id": self.producto.id, "cantidad": 50},
                ],
            )
        self.assertEqual(self.stock(), Decimal("100"))
        self.assertFalse(Movimiento.objects.filter(tipo=TipoMovimiento.DESPACHO).exists())

    def test_despacho_de_todo_el_stock_deja_cero(self):
        registrar_despacho(
            bodega_id=self.bodega.id,
            detalles=[{"producto_id": self.producto.id, "cantidad": 100}],
        )
        self.assertEqual(self.stock(), Decimal("0"))

    def test_despacho_en_otra_bodega_sin_stock(self):
        with self.assertRaises(StockInsuficienteError):
            registrar_despacho(
                bodega_id=self.otra_bodega.id,
                detalles=[{"producto_id": self.producto.id, "cantidad": 1}],
            )
        self.assertEqual(self.stock(bodega=self.otra_bodega), Decimal("0"))

    def test_error_en_segunda_linea_revierte_la_primera(self):
        with self.assertRaises(StockInsuficienteError):
            registrar_despacho(
                bodega_id=self.bodega.id,
                detalles=[
                    {"producto_id": self.producto.id, "cantidad": 10},
                    {"producto_id": self.sin_caja.id, "cantidad": 1},
                ],
            )
        self.assertEqual(self.stock(), Decimal("100"))
        self.assertEqual(MovimientoDetalle.objects.count(), 1)


class ValidacionMovimientoTests(MovimientosBaseTestCase):
    def test_sin_bodega(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_ingreso(
                bodega_id=None,
                detalles=[{"producto_id": self.producto.id, "cantidad": 1}],
            )

    def test_sin_detalles(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_ingreso(bodega_id=self.bodega.id, detalles=[])

    def test_lineas_vacias_o_en_cero_se_descartan(self):
        movimiento = registrar_ingreso(
            bodega_id=self.bodega.id,
            detalles=[
                {"producto_id": None, "cantidad": 5},
                {"producto_id": self.sin_caja.id, "cantidad": 0},
                {"producto_id": self.sin_caja.id},
                {"producto_id": self.producto.id, "cantidad": 2},
            ],
        )
        self.assertEqual(movimiento.detalles.count(), 1)
        self.assertEqual(self.stock(), Decimal("2"))
        self.assertFalse(
            Stock.objects.filter(producto=self.sin_caja, bodega=self.bodega).exists()
        )

    def test_solo_lineas_descartables_es_invalido(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_ingreso(
                bodega_id=self.bodega.id,
                detalles=[{"producto_id": self.producto.id, "cantidad": 0}],
            )
        self.assertFalse(Movimiento.objects.exists())

    def test_cantidad_negativa_invalida_todo(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_ingreso(
                bodega_id=self.bodega.id,
                detalles=[
                    {"producto_id": self.producto.id, "cantidad": 5},
                    {"producto_id": self.sin_caja.id, "cantidad": -1},
                ],
            )
        self.assertFalse(Movimiento.objects.exists())
        self.assertEqual(self.stock(), Decimal("0"))

    def test_cantidad_no_numerica(self):
        for valor in ("abc", True, "NaN"):
            with self.subTest(valor=valor):
                with self.assertRaises(MovimientoInvalidoError):
                    registrar_ingreso(
                        bodega_id=self.bodega.id,
                        detalles=[{"producto_id": self.producto.id, "cantidad": valor}],
                    )

    def test_costo_negativo(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_ingreso(
                bodega_id=self.bodega.id,
                detalles=[{"producto_id": self.producto.id, "cantidad": 1, "costo_unitario": -2}],
            )

    def test_producto_inexistente(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_ingreso(
                bodega_id=self.bodega.id,
                detalles=[
                    {"producto_id": self.producto.id, "cantidad": 1},
                    {"producto_id": 999999, "cantidad": 1},
                ],
            )
        self.assertFalse(Movimiento.objects.exists())
        self.assertEqual(self.stock(), Decimal("0"))

    def test_bodega_inexistente(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_ingreso(
                bodega_id=999999,
                detalles=[{"producto_id": self.producto.id, "cantidad": 1}],
            )

    def test_cliente_inexistente(self):
        self.ingresar(5)
        with self.assertRaises(MovimientoInvalidoError):
            registrar_despacho(
                bodega_id=self.bodega.id,
                cliente_id=999999,
                detalles=[{"producto_id": self.producto.id, "cantidad": 1}],
            )
        self.assertEqual(self.stock(), Decimal("5"))

    def test_proveedor_inexistente(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_ingreso(
                bodega_id=self.bodega.id,
                proveedor_id=999999,
                detalles=[{"producto_id": self.producto.id, "cantidad": 1}],
            )

    def test_tipo_de_movimiento_invalido(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_movimiento(
                tipo="AJUSTE",
                bodega_id=self.bodega.id,
                detalles=[{"producto_id": self.producto.id, "cantidad": 1}],
            )

    def test_detalles_no_es_lista(self):
        with self.assertRaises(MovimientoInvalidoError):
            registrar_ingreso(bodega_id=self.bodega.id, detalles="producto=1")

    def test_registros_inactivos_se_aceptan(self):
        self.producto.activo = False
        self.producto.save()
        self.bodega.activo = False
        self.bodega.save()

        self.ingresar(3)
        self.assertEqual(self.stock(), Decimal("3"))


class ConservacionStockTests(MovimientosBaseTestCase):
    def test_stock_igual_a_ingresos_menos_despachos(self):
        self.ingresar(50)
        self.ingresar(25)
        registrar_despacho(
            bodega_id=self.bodega.id,
            detalles=[{"producto_id": self.producto.id, "cantidad": 40}],
        )
        with self.assertRaises(StockInsuficienteError):
            registrar_despacho(
                bodega_id=self.bodega.id,
                detalles=[{"producto_id": self.producto.id, "cantidad": 36}],
            )
        registrar_despacho(
            bodega_id=self.bodega.id,
            detalles=[{"producto_id": self.producto.id, "cantidad": 35}],
        )

        self.assertEqual(self.stock(), Decimal("0"))
        self.assertEqual(verificar_consistencia_stock(), [])
