# fulfillment_network/services/catalog_service.py
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from fulfillment_network.config import config
from fulfillment_network.db import run_after_commit
from fulfillment_network.exceptions import (
    DuplicateResourceError, ProductNotFoundError, StoreNotFoundError, ValidationError
)
from fulfillment_network.logging_setup import get_logger
from fulfillment_network.models import Product, Store
from fulfillment_network.services.legacy_gateway import LegacyStoreManagerGateway

logger = get_logger(__name__)


class ProductService:
    """Service for product lookups."""

    def __init__(self, session: Session):
        self.session = session

    def exists(self, product_id: int) -> bool:
        return self.session.get(Product, product_id) is not None

    def get_product(self, product_id: int) -> Product:
        product = self.session.get(Product, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def get_all_products(self) -> List[Product]:
        return self.session.query(Product).order_by(Product.name).all()

    def create_product(
        self,
        name: str,
        description: Optional[str] = None,
        price: Optional[Decimal] = None,
        stock: int = 0
    ) -> Product:
        """Create a product.

        Raises:
            ValidationError: If the name is empty
            DuplicateResourceError: If a product with that name exists
        """
        if not name:
            raise ValidationError("Product name is required")
        if self.session.query(Product).filter(Product.name == name).first() is not None:
            raise DuplicateResourceError(f"Product with name {name} already exists")

        product = Product(name=name, description=description, price=price, stock=stock)
        self.session.add(product)
        self.session.flush()
        logger.info(f"Created product {product.id} '{name}'")
        return product


class StoreService:
    """Service for store lookups and store changes mirrored to the legacy system."""

    def __init__(self, session: Session, legacy_gateway: Optional[LegacyStoreManagerGateway] = None):
        """Initialize the store service.

        Args:
            session: Session opened by ``session_scope``
            legacy_gateway: Legacy store manager, notified after commit
        """
        self.session = session
        self.legacy_gateway = legacy_gateway or LegacyStoreManagerGateway()

    def exists(self, store_id: int) -> bool:
        return self.session.get(Store, store_id) is not None

    def get_store(self, store_id: int) -> Store:
        store = self.session.get(Store, store_id)
        if store is None:
            raise StoreNotFoundError(store_id)
        return store

    def get_all_stores(self) -> List[Store]:
        return self.session.query(Store).order_by(Store.name).all()

    def create_store(self, name: str, quantity_products_in_stock: int = 0) -> Store:
        """Create a store and notify the legacy system once committed.

        Raises:
            ValidationError: If the name is empty
            DuplicateResourceError: If a store with that name exists
        """
        if not name:
            raise ValidationError("Store name is required")
        if self.session.query(Store).filter(Store.name == name).first() is not None:
            raise DuplicateResourceError(f"Store with name {name} already exists")

        store = Store(name=name, quantity_products_in_stock=quantity_products_in_stock)
        self.session.add(store)
        self.session.flush()
        logger.info(f"Created store {store.id} '{name}'")

        self._notify_legacy(self.legacy_gateway.create_store_on_legacy_system, store)
        return store

    def update_store(self, store_id: int, name: str, quantity_products_in_stock: Optional[int] = None) -> Store:
        """Rename a store and optionally set its stock count.

        Raises:
            ValidationError: If the name is empty
            StoreNotFoundError: If the store does not exist
        """
        if not name:
            raise ValidationError("Store name was not set on request.")

        store = self.get_store(store_id)
        store.name = name
        if quantity_products_in_stock is not None:
            store.quantity_products_in_stock = quantity_products_in_stock
        self.session.flush()

        self._notify_legacy(self.legacy_gateway.update_store_on_legacy_system, store)
        return store

    def _notify_legacy(self, call, store: Store) -> None:
        if not config.legacy_notifications_enabled:
            return
        # Snapshot now; the row is detached once the session closes
        snapshot = self._snapshot(store)
        run_after_commit(self.session, lambda: call(snapshot))

    @staticmethod
    def _snapshot(store: Store) -> Dict:
        return {
            'id': store.id,
            'name': store.name,
            'quantity_products_in_stock': store.quantity_products_in_stock
        }
