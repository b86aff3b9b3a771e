"""
End-to-end scenarios through the services and a real SQLite database.
"""
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from db_test_case import SqliteTestCase
from fulfillment_network.core.fulfillment import FulfillmentLimits
from fulfillment_network.core.location import Location, LocationDirectory
from fulfillment_network.core.warehouse import Warehouse
from fulfillment_network.db import session_scope
from fulfillment_network.exceptions import (
    CapacityExceededError, DuplicateResourceError, FulfillmentNotFoundError,
    NotFoundError, ValidationError
)
from fulfillment_network.services.fulfillment_service import FulfillmentService
from fulfillment_network.services.warehouse_service import WarehouseService
from fulfillment_network.services.warehouse_store import SqlAlchemyWarehouseStore


class TestWarehouseLifecycle(SqliteTestCase):
    """Archiving a warehouse frees its slot at the location."""

    def setUp(self):
        super().setUp()
        self.directory = LocationDirectory({"L1": Location("L1", 1, 40)})

    def service(self, session):
        return WarehouseService(SqlAlchemyWarehouseStore(session), self.directory)

    def test_archive_frees_location_slot(self):
        with session_scope() as session:
            self.service(session).create_warehouse(Warehouse("A", "L1", 20, 0))

        with self.assertRaises(CapacityExceededError) as ctx:
            with session_scope() as session:
                self.service(session).create_warehouse(Warehouse("B", "L1", 10, 0))
        self.assertIn("Maximum number of warehouses", ctx.exception.message)

        with session_scope() as session:
            self.service(session).archive_warehouse("A")

        with session_scope() as session:
            created = self.service(session).create_warehouse(Warehouse("B", "L1", 10, 0))

        self.assertTrue(created.is_active)
        with session_scope() as session:
            usage = self.service(session).location_usage("L1")
        self.assertEqual(usage['active_warehouses'], 1)
        self.assertEqual(usage['used_capacity'], 10)

    def test_failed_create_writes_nothing(self):
        with self.assertRaises(ValidationError):
            with session_scope() as session:
                self.service(session).create_warehouse(Warehouse("A", "L1", 20, 30))

        with session_scope() as session:
            self.assertEqual(self.service(session).list_warehouses(include_archived=True), [])

    def test_replace_in_place(self):
        directory = LocationDirectory({"L1": Location("L1", 3, 100)})
        with session_scope() as session:
            service = WarehouseService(SqlAlchemyWarehouseStore(session), directory)
            service.create_warehouse(Warehouse("A", "L1", 30, 10))
            service.create_warehouse(Warehouse("B", "L1", 30, 0))

        with session_scope() as session:
            service = WarehouseService(SqlAlchemyWarehouseStore(session), directory)
            replaced = service.replace_warehouse(Warehouse("A", "L1", 40, 10))

        self.assertEqual(replaced.capacity, 40)
        with session_scope() as session:
            store = SqlAlchemyWarehouseStore(session)
            self.assertEqual(store.total_capacity_active("L1"), 70)


    def test_replace_into_full_location_is_rejected(self):
        directory = LocationDirectory({
            "L1": Location("L1", 1, 100),
            "L2": Location("L2", 5, 100),
        })
        with session_scope() as session:
            service = WarehouseService(SqlAlchemyWarehouseStore(session), directory)
            service.create_warehouse(Warehouse("A", "L1", 30, 0))
            service.create_warehouse(Warehouse("B", "L2", 10, 0))

        with self.assertRaises(CapacityExceededError) as ctx:
            with session_scope() as session:
                WarehouseService(SqlAlchemyWarehouseStore(session), directory).replace_warehouse(
                    Warehouse("B", "L1", 10, 0)
                )
        self.assertIn("Maximum number of warehouses (1)", ctx.exception.message)

        with session_scope() as session:
            store = SqlAlchemyWarehouseStore(session)
            self.assertEqual(store.count_active("L1"), 1)
            self.assertEqual(store.find_by_code("B").location, "L2")

    def test_negative_capacity_cannot_free_location_capacity(self):
        directory = LocationDirectory({"L1": Location("L1", 2, 100)})

        with self.assertRaises(ValidationError):
            with session_scope() as session:
                WarehouseService(SqlAlchemyWarehouseStore(session), directory).create_warehouse(
                    Warehouse("NEG", "L1", -50, -60)
                )

        with self.assertRaises(CapacityExceededError):
            with session_scope() as session:
                WarehouseService(SqlAlchemyWarehouseStore(session), directory).create_warehouse(
                    Warehouse("BIG", "L1", 150, 0)
                )

        with session_scope() as session:
            self.assertEqual(SqlAlchemyWarehouseStore(session).count_active("L1"), 0)

class TestFulfillmentScenarios(SqliteTestCase):
    """Association limits enforced through FulfillmentService."""

    def setUp(self):
        super().setUp()
        self.products = [self.add_product(f"Product {i}") for i in range(1, 8)]
        self.stores = [self.add_store(f"Store {i}") for i in range(1, 3)]
        with session_scope() as session:
            service = WarehouseService(SqlAlchemyWarehouseStore(session))
            for code in ("MWH.001", "MWH.002", "MWH.003", "MWH.004"):
                service.create_warehouse(Warehouse(code, "AMSTERDAM-001", 10, 0))

    def link(self, product_id, warehouse, store_id):
        with session_scope() as session:
            return FulfillmentService(session, FulfillmentLimits()).create_fulfillment(
                product_id, warehouse, store_id
            )

    def stats(self, method, *args):
        with session_scope() as session:
            return getattr(FulfillmentService(session, FulfillmentLimits()), method)(*args)

    def test_create_twice_is_duplicate(self):
        product, store = self.products[0], self.stores[0]
        self.link(product, "MWH.001", store)

        with self.assertRaises(DuplicateResourceError):
            self.link(product, "MWH.001", store)

    def test_unknown_entities(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.link(999, "MWH.404", 888)

        self.assertIn("Product with ID 999", ctx.exception.message)
        self.assertIn("Warehouse with business unit MWH.404", ctx.exception.message)
        self.assertIn("Store with ID 888", ctx.exception.message)

    def test_product_limit_per_store(self):
        product, store = self.products[0], self.stores[0]
        self.link(product, "MWH.001", store)
        self.link(product, "MWH.002", store)

        with self.assertRaises(ValidationError) as ctx:
            self.link(product, "MWH.003", store)

        self.assertIn("already has 2 warehouses", ctx.exception.message)

    def test_store_limit_exempts_linked_warehouse(self):
        store = self.stores[0]
        self.link(self.products[0], "MWH.001", store)
        self.link(self.products[1], "MWH.002", store)
        self.link(self.products[2], "MWH.003", store)

        with self.assertRaises(ValidationError) as ctx:
            self.link(self.products[3], "MWH.004", store)
        self.assertIn("already has 3 different warehouses", ctx.exception.message)

        self.link(self.products[3], "MWH.002", store)

        stats = self.stats('get_store_stats', store)
        self.assertEqual(stats.current_count, 3)
        self.assertEqual(stats.total_fulfillments, 4)
        self.assertFalse(stats.can_add_more)

    def test_warehouse_limit_exempts_linked_product(self):
        store_1, store_2 = self.stores
        for product in self.products[:5]:
            self.link(product, "MWH.001", store_1)

        with self.assertRaises(ValidationError) as ctx:
            self.link(self.products[5], "MWH.001", store_1)
        self.assertIn("already has 5 different products", ctx.exception.message)

        self.link(self.products[2], "MWH.001", store_2)

        stats = self.stats('get_warehouse_stats', "MWH.001")
        self.assertEqual(stats.current_count, 5)
        self.assertEqual(stats.max_allowed, 5)
        self.assertEqual(stats.total_fulfillments, 6)

    def test_product_stats(self):
        product = self.products[0]
        self.link(product, "MWH.001", self.stores[0])
        self.link(product, "MWH.002", self.stores[0])
        self.link(product, "MWH.001", self.stores[1])

        stats = self.stats('get_product_stats', product)

        self.assertEqual(stats.current_count, 2)
        self.assertIsNone(stats.max_allowed)
        self.assertEqual(stats.additional_count, 2)
        self.assertTrue(stats.can_add_more)

    def test_product_in_store(self):
        product, store = self.products[0], self.stores[0]
        self.link(product, "MWH.002", store)
        self.link(product, "MWH.001", store)
        self.link(product, "MWH.003", self.stores[1])

        stats = self.stats('get_product_store_stats', product, store)
        self.assertEqual(stats.current_count, 2)
        self.assertEqual(stats.max_allowed, 2)
        self.assertFalse(stats.can_add_more)

        with session_scope() as session:
            fulfillments = FulfillmentService(session).get_product_store_fulfillments(product, store)
        self.assertEqual(sorted(f.warehouse_business_unit for f in fulfillments), ["MWH.001", "MWH.002"])

    def test_delete(self):
        product, store = self.products[0], self.stores[0]
        self.link(product, "MWH.001", store)

        with session_scope() as session:
            FulfillmentService(session).delete_fulfillment(product, "MWH.001", store)

        with session_scope() as session:
            self.assertEqual(FulfillmentService(session).get_store_fulfillments(store), [])

        with self.assertRaises(FulfillmentNotFoundError):
            with session_scope() as session:
                FulfillmentService(session).delete_fulfillment(product, "MWH.001", store)


if __name__ == '__main__':
    unittest.main()
