"""
Routes for fulfillment associations and warehouse units.

Every request runs inside one ``session_scope``: domain errors raised by the
services roll the transaction back and are rendered by the application's
error handler.
"""
from flask import Blueprint, jsonify, request

from fulfillment_network.core.warehouse import Warehouse
from fulfillment_network.db import session_scope
from fulfillment_network.exceptions import ErrorCode, ValidationError
from fulfillment_network.services.fulfillment_service import FulfillmentService
from fulfillment_network.services.warehouse_service import WarehouseService
from fulfillment_network.services.warehouse_store import SqlAlchemyWarehouseStore

fulfillment_bp = Blueprint('fulfillment', __name__, url_prefix='/api/fulfillment')
warehouse_bp = Blueprint('warehouse', __name__, url_prefix='/warehouse')


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", code=ErrorCode.INVALID_INPUT)
    return data


def _require(data, field, expected_type, minimum=None):
    value = data.get(field)
    # bool is an int subclass but never a valid id or quantity
    if value is None or isinstance(value, bool) or not isinstance(value, expected_type):
        raise ValidationError(
            f"Field '{field}' is required and must be of type {expected_type.__name__}",
            code=ErrorCode.INVALID_INPUT
        )
    if expected_type is str and not value.strip():
        raise ValidationError(f"Field '{field}' must not be empty", code=ErrorCode.INVALID_INPUT)
    if minimum is not None and value < minimum:
        raise ValidationError(f"Field '{field}' must be at least {minimum}", code=ErrorCode.INVALID_INPUT)
    return value


def _fulfillment_request():
    data = _json_body()
    return (
        _require(data, 'product_id', int),
        _require(data, 'warehouse_business_unit', str),
        _require(data, 'store_id', int)
    )


def _warehouse_request(business_unit_code=None):
    data = _json_body()
    return Warehouse(
        business_unit_code=business_unit_code or _require(data, 'business_unit_code', str),
        location=_require(data, 'location', str),
        capacity=_require(data, 'capacity', int, minimum=0),
        stock=_require(data, 'stock', int, minimum=0)
    )


def _fulfillment_list(fulfillments):
    return jsonify({
        'success': True,
        'fulfillments': [fulfillment.to_dict() for fulfillment in fulfillments],
        'count': len(fulfillments)
    })


# Fulfillment associations

@fulfillment_bp.route('/', methods=['POST'])
def create_fulfillment():
    """Create a fulfillment association."""
    product_id, warehouse_business_unit, store_id = _fulfillment_request()

    with session_scope() as session:
        fulfillment = FulfillmentService(session).create_fulfillment(
            product_id, warehouse_business_unit, store_id
        )
        body = fulfillment.to_dict()

    response = jsonify({'success': True, 'fulfillment': body})
    response.status_code = 201
    response.headers['Location'] = (
        f"/api/fulfillment/product/{product_id}/warehouse/{warehouse_business_unit}/store/{store_id}"
    )
    return response


@fulfillment_bp.route('/', methods=['DELETE'])
def delete_fulfillment():
    """Delete a fulfillment association."""
    product_id, warehouse_business_unit, store_id = _fulfillment_request()

    with session_scope() as session:
        FulfillmentService(session).delete_fulfillment(product_id, warehouse_business_unit, store_id)

    return '', 204


@fulfillment_bp.route('/', methods=['GET'])
def get_all_fulfillments():
    with session_scope() as session:
        fulfillments = FulfillmentService(session).get_all_fulfillments()
    return _fulfillment_list(fulfillments)


@fulfillment_bp.route('/store/<int:store_id>', methods=['GET'])
def get_store_fulfillments(store_id):
    with session_scope() as session:
        fulfillments = FulfillmentService(session).get_store_fulfillments(store_id)
    return _fulfillment_list(fulfillments)


@fulfillment_bp.route('/product/<int:product_id>', methods=['GET'])
def get_product_fulfillments(product_id):
    with session_scope() as session:
        fulfillments = FulfillmentService(session).get_product_fulfillments(product_id)
    return _fulfillment_list(fulfillments)


@fulfillment_bp.route('/product/<int:product_id>/store/<int:store_id>', methods=['GET'])
def get_product_store_fulfillments(product_id, store_id):
    with session_scope() as session:
        fulfillments = FulfillmentService(session).get_product_store_fulfillments(product_id, store_id)
    return _fulfillment_list(fulfillments)


@fulfillment_bp.route('/warehouse/<warehouse_business_unit>', methods=['GET'])
def get_warehouse_fulfillments(warehouse_business_unit):
    with session_scope() as session:
        fulfillments = FulfillmentService(session).get_warehouse_fulfillments(warehouse_business_unit)
    return _fulfillment_list(fulfillments)


@fulfillment_bp.route('/store/<int:store_id>/stats', methods=['GET'])
def get_store_stats(store_id):
    """Distinct warehouses fulfilling a store."""
    with session_scope() as session:
        stats = FulfillmentService(session).get_store_stats(store_id)
    return jsonify({'success': True, 'stats': stats.to_dict()})


@fulfillment_bp.route('/product/<int:product_id>/stats', methods=['GET'])
def get_product_stats(product_id):
    """Warehouses and stores a product is fulfilled through."""
    with session_scope() as session:
        stats = FulfillmentService(session).get_product_stats(product_id)
    return jsonify({'success': True, 'stats': stats.to_dict()})


@fulfillment_bp.route('/product/<int:product_id>/store/<int:store_id>/stats', methods=['GET'])
def get_product_store_stats(product_id, store_id):
    """Warehouses fulfilling a product for one store."""
    with session_scope() as session:
        stats = FulfillmentService(session).get_product_store_stats(product_id, store_id)
    return jsonify({'success': True, 'stats': stats.to_dict()})


@fulfillment_bp.route('/warehouse/<warehouse_business_unit>/stats', methods=['GET'])
def get_warehouse_stats(warehouse_business_unit):
    """Distinct products stored in a warehouse."""
    with session_scope() as session:
        stats = FulfillmentService(session).get_warehouse_stats(warehouse_business_unit)
    return jsonify({'success': True, 'stats': stats.to_dict()})


# Warehouse units

@warehouse_bp.route('/', methods=['GET'])
def list_warehouses():
    """List active warehouses, or all of them with ``?include_archived=true``."""
    include_archived = request.args.get('include_archived', 'false').lower() == 'true'

    with session_scope() as session:
        warehouses = WarehouseService(SqlAlchemyWarehouseStore(session)).list_warehouses(include_archived)

    return jsonify({
        'success': True,
        'warehouses': [warehouse.to_dict() for warehouse in warehouses],
        'count': len(warehouses)
    })


@warehouse_bp.route('/', methods=['POST'])
def create_warehouse():
    """Create a new warehouse unit."""
    warehouse = _warehouse_request()

    with session_scope() as session:
        created = WarehouseService(SqlAlchemyWarehouseStore(session)).create_warehouse(warehouse)

    return jsonify({'success': True, 'warehouse': created.to_dict()}), 201


@warehouse_bp.route('/<int:warehouse_id>', methods=['GET'])
def get_warehouse(warehouse_id):
    with session_scope() as session:
        warehouse = WarehouseService(SqlAlchemyWarehouseStore(session)).get_warehouse_by_id(warehouse_id)
    return jsonify({'success': True, 'warehouse': warehouse.to_dict()})


@warehouse_bp.route('/<int:warehouse_id>', methods=['DELETE'])
def archive_warehouse(warehouse_id):
    """Archive a warehouse unit by its id."""
    with session_scope() as session:
        WarehouseService(SqlAlchemyWarehouseStore(session)).archive_warehouse_by_id(warehouse_id)
    return '', 204


@warehouse_bp.route('/<business_unit_code>/replacement', methods=['POST'])
def replace_warehouse(business_unit_code):
    """Replace the current warehouse unit under a business unit code."""
    warehouse = _warehouse_request(business_unit_code)

    with session_scope() as session:
        replaced = WarehouseService(SqlAlchemyWarehouseStore(session)).replace_warehouse(warehouse)

    return jsonify({'success': True, 'warehouse': replaced.to_dict()})
