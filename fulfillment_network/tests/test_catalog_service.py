"""
Tests for product and store lookups.
"""
import os
import sys
import unittest
from decimal import Decimal

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from db_test_case import SqliteTestCase
from fulfillment_network.db import session_scope
from fulfillment_network.exceptions import (
    DuplicateResourceError, ProductNotFoundError, StoreNotFoundError, ValidationError
)
from fulfillment_network.services.catalog_service import ProductService, StoreService
from fulfillment_network.services.legacy_gateway import LegacyStoreManagerGateway


class TestProductService(SqliteTestCase):

    def test_create_and_get(self):
        with session_scope() as session:
            product_id = ProductService(session).create_product("Widget", "A widget", Decimal("9.99"), 3).id

        with session_scope() as session:
            service = ProductService(session)
            product = service.get_product(product_id)
            self.assertEqual(product.name, "Widget")
            self.assertEqual(product.price, Decimal("9.99"))
            self.assertTrue(service.exists(product_id))
            self.assertEqual([p.name for p in service.get_all_products()], ["Widget"])

    def test_unknown_product(self):
        with session_scope() as session:
            service = ProductService(session)
            self.assertFalse(service.exists(404))
            with self.assertRaises(ProductNotFoundError) as ctx:
                service.get_product(404)

        self.assertEqual(ctx.exception.message, "Product with id 404 not found")

    def test_duplicate_and_empty_name(self):
        self.add_product("Widget")

        with session_scope() as session:
            service = ProductService(session)
            with self.assertRaises(DuplicateResourceError):
                service.create_product("Widget")
            with self.assertRaises(ValidationError):
                service.create_product("")


class TestStoreService(SqliteTestCase):

    def test_unknown_store(self):
        with session_scope() as session:
            service = StoreService(session, LegacyStoreManagerGateway())
            self.assertFalse(service.exists(404))
            with self.assertRaises(StoreNotFoundError):
                service.get_store(404)
            with self.assertRaises(StoreNotFoundError):
                service.update_store(404, "Store B")

    def test_update_requires_name(self):
        store_id = self.add_store("Store A")

        with self.assertRaises(ValidationError) as ctx:
            with session_scope() as session:
                StoreService(session).update_store(store_id, "")

        self.assertEqual(ctx.exception.message, "Store name was not set on request.")

    def test_list_stores(self):
        self.add_store("Store B")
        self.add_store("Store A", 12)

        with session_scope() as session:
            stores = StoreService(session).get_all_stores()
            self.assertEqual([(s.name, s.quantity_products_in_stock) for s in stores], [("Store A", 12), ("Store B", 0)])

    def test_duplicate_store(self):
        self.add_store("Store A")

        with self.assertRaises(DuplicateResourceError):
            with session_scope() as session:
                StoreService(session).create_store("Store A")


if __name__ == '__main__':
    unittest.main()
