"""
Flask application for the Fulfillment Network.

Routes live in ``fulfillment_network.api.routes``; this module only builds the
application and maps domain errors to JSON responses.
"""
from flask import Flask, jsonify

from fulfillment_network.db import db
from fulfillment_network.exceptions import FulfillmentNetworkError
from fulfillment_network.logging_setup import get_logger, log_exception

logger = get_logger(__name__)


def create_app(connection_string=None, create_tables=False):
    """Create the Flask application.

    Args:
        connection_string: Optional database URL, defaults to configuration
        create_tables: Create missing tables on start-up

    Returns:
        Configured Flask application
    """
    from fulfillment_network.api.routes import fulfillment_bp, warehouse_bp

    db.initialize(connection_string)
    if create_tables:
        db.create_all_tables()

    app = Flask(__name__)
    app.register_blueprint(fulfillment_bp)
    app.register_blueprint(warehouse_bp)

    @app.errorhandler(FulfillmentNetworkError)
    def handle_domain_error(e):
        if e.http_status >= 500:
            log_exception(__name__, e, "Request failed")
        else:
            logger.info(f"Request rejected ({e.code}): {e.message}")
        body = {'success': False}
        body.update(e.to_dict())
        return jsonify(body), e.http_status

    logger.info("Fulfillment Network API initialized")
    return app
