from .config import config
from .db import db, session_scope, run_after_commit
from .logging_setup import logger, get_logger
from .exceptions import (
    FulfillmentNetworkError, NotFoundError, ValidationError,
    CapacityExceededError, StockMismatchError, DuplicateResourceError
)

__all__ = [
    'config',
    'db',
    'session_scope',
    'run_after_commit',
    'logger',
    'get_logger',
    'FulfillmentNetworkError',
    'NotFoundError',
    'ValidationError',
    'CapacityExceededError',
    'StockMismatchError',
    'DuplicateResourceError'
]
