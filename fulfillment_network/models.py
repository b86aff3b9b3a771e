# fulfillment_network/models.py
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

class Product(Base):
    __tablename__ = 'product'

    id = Column(Integer, primary_key=True)
    name = Column(String(40), nullable=False, unique=True)
    description = Column(String(255))
    price = Column(Numeric(10, 2))
    stock = Column(Integer, default=0)

    fulfillments = relationship("ProductWarehouseFulfillment", back_populates="product")

class Store(Base):
    __tablename__ = 'store'

    id = Column(Integer, primary_key=True)
    name = Column(String(40), nullable=False, unique=True)
    quantity_products_in_stock = Column(Integer, default=0)

    fulfillments = relationship("ProductWarehouseFulfillment", back_populates="store")

class WarehouseRecord(Base):
    """Persisted warehouse row.

    ``business_unit_code`` is the identity every business rule keys off;
    ``id`` is only a surrogate. A row with ``archived_at`` set is archived
    and excluded from every location quota.
    """
    __tablename__ = 'warehouse'

    id = Column(Integer, primary_key=True)
    business_unit_code = Column(String(50), nullable=False, unique=True)
    location = Column(String(50), nullable=False)
    capacity = Column(Integer)
    stock = Column(Integer)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    archived_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index('idx_warehouse_location_archived', 'location', 'archived_at'),
    )

class ProductWarehouseFulfillment(Base):
    """Association stating that a warehouse fulfills a product for a store.

    Constraints enforced by the validation service:
        1. A product is fulfilled by at most 2 warehouses per store
        2. A store is fulfilled by at most 3 different warehouses
        3. A warehouse stores at most 5 different products
    """
    __tablename__ = 'product_warehouse_fulfillment'

    product_id = Column(Integer, ForeignKey('product.id'), primary_key=True)
    warehouse_business_unit = Column(String(50), ForeignKey('warehouse.business_unit_code'), primary_key=True)
    store_id = Column(Integer, ForeignKey('store.id'), primary_key=True)
    created_at = Column(DateTime, nullable=False)

    product = relationship("Product", back_populates="fulfillments")
    store = relationship("Store", back_populates="fulfillments")

    __table_args__ = (
        Index('idx_pwf_store', 'store_id'),
        Index('idx_pwf_product', 'product_id'),
        Index('idx_pwf_warehouse', 'warehouse_business_unit'),
    )
