# fulfillment_network/services/legacy_gateway.py
from typing import Dict

from fulfillment_network.logging_setup import get_logger

logger = get_logger(__name__)


class LegacyStoreManagerGateway:
    """Forwards store changes to the legacy store manager.

    Calls are only made once the local transaction has committed, see
    ``StoreService``. The legacy system has no transactional API, so a call
    that fails is reported and not retried.
    """

    def create_store_on_legacy_system(self, store: Dict) -> None:
        self._write('create', store)

    def update_store_on_legacy_system(self, store: Dict) -> None:
        self._write('update', store)

    def _write(self, operation: str, store: Dict) -> None:
        logger.info(
            f"Legacy store manager {operation}: store {store.get('id')} "
            f"'{store.get('name')}' with {store.get('quantity_products_in_stock')} products in stock"
        )
