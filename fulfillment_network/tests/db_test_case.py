"""
Shared base class for tests that run against an in-memory SQLite database.
"""
import unittest

from fulfillment_network.db import db, session_scope
from fulfillment_network.models import Product, Store


class SqliteTestCase(unittest.TestCase):
    """Creates a fresh schema on the real ``Database`` singleton for every test."""

    def setUp(self):
        db.initialize('sqlite://')
        db.create_all_tables()

    def tearDown(self):
        db.drop_all_tables()
        db.dispose()

    def add_product(self, name, stock=0):
        with session_scope() as session:
            product = Product(name=name, stock=stock)
            session.add(product)
            session.flush()
            return product.id

    def add_store(self, name, quantity=0):
        with session_scope() as session:
            store = Store(name=name, quantity_products_in_stock=quantity)
            session.add(store)
            session.flush()
            return store.id
