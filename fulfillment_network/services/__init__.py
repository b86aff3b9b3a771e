from .warehouse_store import WarehouseStore, SqlAlchemyWarehouseStore
from .warehouse_service import WarehouseService
from .fulfillment_store import FulfillmentStore
from .fulfillment_validation import FulfillmentValidationService
from .fulfillment_service import FulfillmentService
from .catalog_service import ProductService, StoreService
from .legacy_gateway import LegacyStoreManagerGateway

__all__ = [
    'WarehouseStore',
    'SqlAlchemyWarehouseStore',
    'WarehouseService',
    'FulfillmentStore',
    'FulfillmentValidationService',
    'FulfillmentService',
    'ProductService',
    'StoreService',
    'LegacyStoreManagerGateway'
]
