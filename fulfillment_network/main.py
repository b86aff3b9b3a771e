import argparse
import sys
from decimal import Decimal

from tabulate import tabulate

from fulfillment_network.config import config
from fulfillment_network.core.location import LocationDirectory
from fulfillment_network.core.warehouse import Warehouse
from fulfillment_network.db import db, session_scope
from fulfillment_network.exceptions import FulfillmentNetworkError
from fulfillment_network.logging_setup import logger, get_logger
from fulfillment_network.services.catalog_service import ProductService, StoreService
from fulfillment_network.services.fulfillment_service import FulfillmentService
from fulfillment_network.services.warehouse_service import WarehouseService
from fulfillment_network.services.warehouse_store import SqlAlchemyWarehouseStore

log = get_logger('cli')


def init_application(connection_string=None):
    """Initialize application components."""
    db.initialize(connection_string)

    app_log = logger.app_logger
    app_log.info("Fulfillment Network initialized")
    app_log.info(f"Using database: {config.get('DATABASE', 'engine')} {config.get('DATABASE', 'database')}")

    return True


def _print_warehouses(warehouses):
    table_data = [
        [w.id, w.business_unit_code, w.location, w.capacity, w.stock, w.status,
         w.archived_at.strftime('%Y-%m-%d %H:%M') if w.archived_at else '']
        for w in warehouses
    ]
    print(tabulate(table_data, headers=['ID', 'Business Unit', 'Location', 'Capacity', 'Stock', 'Status', 'Archived At']))


def _print_fulfillments(fulfillments):
    table_data = [
        [f.product_id, f.product_name, f.warehouse_business_unit, f.store_id, f.store_name]
        for f in fulfillments
    ]
    print(tabulate(table_data, headers=['Product ID', 'Product', 'Warehouse', 'Store ID', 'Store']))
    print(f"\nTotal Fulfillments: {len(fulfillments)}")


def init_db(args):
    """Create the database tables."""
    if args.drop:
        log.info("Dropping existing tables...")
        db.drop_all_tables()
    db.create_all_tables()
    log.info("Database tables created successfully.")
    print("Database initialized")


def list_locations(args):
    table_data = [
        [loc.identification, loc.max_number_of_warehouses, loc.max_capacity]
        for loc in LocationDirectory().list_locations()
    ]
    print(tabulate(table_data, headers=['Location', 'Max Warehouses', 'Max Capacity']))


def product_command(args):
    with session_scope() as session:
        service = ProductService(session)
        if args.action == 'add':
            price = Decimal(args.price) if args.price is not None else None
            product = service.create_product(args.name, args.description, price, args.stock)
            print(f"Created product {product.id}: {product.name}")
        else:
            table_data = [[p.id, p.name, p.description, p.price, p.stock] for p in service.get_all_products()]
            print(tabulate(table_data, headers=['ID', 'Name', 'Description', 'Price', 'Stock']))


def store_command(args):
    with session_scope() as session:
        service = StoreService(session)
        if args.action == 'add':
            store = service.create_store(args.name, args.quantity)
            print(f"Created store {store.id}: {store.name}")
        elif args.action == 'update':
            store = service.update_store(args.store_id, args.name, args.quantity)
            print(f"Updated store {store.id}: {store.name}")
        else:
            table_data = [[s.id, s.name, s.quantity_products_in_stock] for s in service.get_all_stores()]
            print(tabulate(table_data, headers=['ID', 'Name', 'Products In Stock']))


def warehouse_command(args):
    with session_scope() as session:
        service = WarehouseService(SqlAlchemyWarehouseStore(session))

        if args.action == 'create':
            warehouse = service.create_warehouse(
                Warehouse(args.business_unit_code, args.location, args.capacity, args.stock)
            )
            print(f"Created warehouse {warehouse.business_unit_code} at {warehouse.location}")
        elif args.action == 'archive':
            warehouse = service.archive_warehouse(args.business_unit_code)
            print(f"Archived warehouse {warehouse.business_unit_code}")
        elif args.action == 'replace':
            warehouse = service.replace_warehouse(
                Warehouse(args.business_unit_code, args.location, args.capacity, args.stock)
            )
            print(f"Replaced warehouse {warehouse.business_unit_code}, now at {warehouse.location}")
        elif args.action == 'usage':
            usage = service.location_usage(args.location)
            print(tabulate(list(usage.items()), headers=['Metric', 'Value']))
        else:
            _print_warehouses(service.list_warehouses(include_archived=args.all))


def fulfillment_command(args):
    with session_scope() as session:
        service = FulfillmentService(session)

        if args.action == 'link':
            service.create_fulfillment(args.product_id, args.warehouse, args.store_id)
            print(f"Linked product {args.product_id} to warehouse {args.warehouse} for store {args.store_id}")
        elif args.action == 'unlink':
            service.delete_fulfillment(args.product_id, args.warehouse, args.store_id)
            print(f"Unlinked product {args.product_id} from warehouse {args.warehouse} for store {args.store_id}")
        elif args.action == 'stats':
            if args.product_id is not None and args.store_id is not None:
                stats = service.get_product_store_stats(args.product_id, args.store_id)
            elif args.store_id is not None:
                stats = service.get_store_stats(args.store_id)
            elif args.product_id is not None:
                stats = service.get_product_stats(args.product_id)
            elif args.warehouse is not None:
                stats = service.get_warehouse_stats(args.warehouse)
            else:
                print("Specify --store-id, --product-id or --warehouse")
                return
            print(tabulate(list(stats.to_dict().items()), headers=['Metric', 'Value']))
        else:
            if args.product_id is not None and args.store_id is not None:
                fulfillments = service.get_product_store_fulfillments(args.product_id, args.store_id)
            elif args.store_id is not None:
                fulfillments = service.get_store_fulfillments(args.store_id)
            elif args.product_id is not None:
                fulfillments = service.get_product_fulfillments(args.product_id)
            elif args.warehouse is not None:
                fulfillments = service.get_warehouse_fulfillments(args.warehouse)
            else:
                fulfillments = service.get_all_fulfillments()
            _print_fulfillments(fulfillments)


def build_parser():
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(description='Fulfillment Network')
    parser.add_argument('--database-url', help='Database URL, overrides settings.ini')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # init-db
    init_parser = subparsers.add_parser('init-db', help='Create the database tables')
    init_parser.add_argument('--drop', action='store_true', help='Drop existing tables first')
    init_parser.set_defaults(func=init_db)

    # locations
    locations_parser = subparsers.add_parser('locations', help='List the known locations')
    locations_parser.set_defaults(func=list_locations)

    # product
    product_parser = subparsers.add_parser('product', help='Manage products')
    product_actions = product_parser.add_subparsers(dest='action', required=True)
    product_add = product_actions.add_parser('add', help='Add a product')
    product_add.add_argument('name')
    product_add.add_argument('--description')
    product_add.add_argument('--price')
    product_add.add_argument('--stock', type=int, default=0)
    product_actions.add_parser('list', help='List products')
    product_parser.set_defaults(func=product_command)

    # store
    store_parser = subparsers.add_parser('store', help='Manage stores')
    store_actions = store_parser.add_subparsers(dest='action', required=True)
    store_add = store_actions.add_parser('add', help='Add a store')
    store_add.add_argument('name')
    store_add.add_argument('--quantity', type=int, default=0, help='Products in stock')
    store_update = store_actions.add_parser('update', help='Rename a store')
    store_update.add_argument('store_id', type=int)
    store_update.add_argument('name')
    store_update.add_argument('--quantity', type=int, help='Products in stock')
    store_actions.add_parser('list', help='List stores')
    store_parser.set_defaults(func=store_command)

    # warehouse
    warehouse_parser = subparsers.add_parser('warehouse', help='Manage warehouse units')
    warehouse_actions = warehouse_parser.add_subparsers(dest='action', required=True)
    for action in ('create', 'replace'):
        action_parser = warehouse_actions.add_parser(action, help=f'{action.capitalize()} a warehouse')
        action_parser.add_argument('business_unit_code')
        action_parser.add_argument('--location', required=True)
        action_parser.add_argument('--capacity', type=int, required=True)
        action_parser.add_argument('--stock', type=int, required=True)
    warehouse_archive = warehouse_actions.add_parser('archive', help='Archive a warehouse')
    warehouse_archive.add_argument('business_unit_code')
    warehouse_list = warehouse_actions.add_parser('list', help='List warehouses')
    warehouse_list.add_argument('--all', action='store_true', help='Include archived warehouses')
    warehouse_usage = warehouse_actions.add_parser('usage', help='Show usage of a location')
    warehouse_usage.add_argument('location')
    warehouse_parser.set_defaults(func=warehouse_command)

    # fulfillment
    fulfillment_parser = subparsers.add_parser('fulfillment', help='Manage fulfillment associations')
    fulfillment_actions = fulfillment_parser.add_subparsers(dest='action', required=True)
    for action in ('link', 'unlink'):
        action_parser = fulfillment_actions.add_parser(action, help=f'{action.capitalize()} an association')
        action_parser.add_argument('--product-id', type=int, required=True)
        action_parser.add_argument('--warehouse', required=True, help='Warehouse business unit code')
        action_parser.add_argument('--store-id', type=int, required=True)
    for action in ('list', 'stats'):
        action_parser = fulfillment_actions.add_parser(action, help=f'{action.capitalize()} associations')
        action_parser.add_argument('--product-id', type=int)
        action_parser.add_argument('--warehouse', help='Warehouse business unit code')
        action_parser.add_argument('--store-id', type=int)
    fulfillment_parser.set_defaults(func=fulfillment_command)

    return parser


def main(argv=None):
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        print("No action specified. Use --help for available options.")
        return 1

    init_application(args.database_url)

    try:
        args.func(args)
    except FulfillmentNetworkError as e:
        log.error(f"{args.command} failed: {e.message}")
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
