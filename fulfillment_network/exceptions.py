import enum


class ErrorCode(enum.Enum):
    """Error codes shared by every surface that reports a failure.

    Each member carries the HTTP status it maps to and a default message.
    """
    RESOURCE_NOT_FOUND = ('RESOURCE_NOT_FOUND', 404, 'Requested resource not found')
    STORE_NOT_FOUND = ('STORE_NOT_FOUND', 404, 'Store not found')
    WAREHOUSE_NOT_FOUND = ('WAREHOUSE_NOT_FOUND', 404, 'Warehouse not found')
    LOCATION_NOT_FOUND = ('LOCATION_NOT_FOUND', 404, 'Location not found')
    PRODUCT_NOT_FOUND = ('PRODUCT_NOT_FOUND', 404, 'Product not found')
    FULFILLMENT_NOT_FOUND = ('FULFILLMENT_NOT_FOUND', 404, 'Fulfillment association not found')

    VALIDATION_ERROR = ('VALIDATION_ERROR', 400, 'Request validation failed')
    INVALID_INPUT = ('INVALID_INPUT', 400, 'Invalid input provided')
    DUPLICATE_RESOURCE = ('DUPLICATE_RESOURCE', 400, 'Resource already exists')
    CAPACITY_EXCEEDED = ('CAPACITY_EXCEEDED', 400, 'Capacity limit exceeded')
    STOCK_MISMATCH = ('STOCK_MISMATCH', 400, 'Stock values do not match')

    INTERNAL_ERROR = ('INTERNAL_ERROR', 500, 'Internal server error')

    def __init__(self, code, http_status, default_message):
        self.code = code
        self.http_status = http_status
        self.default_message = default_message

    def __str__(self):
        """Return the string value of the code."""
        return self.code


class FulfillmentNetworkError(Exception):
    """Base exception for Fulfillment Network errors."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.

        Args:
            message: Error message
            code: ErrorCode member, defaults to the class default
            details: Additional error details
        """
        self.code = code or self.default_code
        self.message = message or self.code.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def http_status(self):
        return self.code.http_status

    def __str__(self):
        """String representation of the error."""
        return self.message

    def to_dict(self):
        """Convert the exception to a dictionary."""
        error_dict = {
            'error': self.__class__.__name__,
            'code': self.code.code,
            'message': self.message,
        }

        if self.details:
            error_dict['details'] = self.details

        return error_dict


class ConfigError(FulfillmentNetworkError):
    """Exception raised for configuration errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Configuration error"
        super().__init__(message, code, details)


class DatabaseError(FulfillmentNetworkError):
    """Exception raised for unexpected persistence failures."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Database error"
        super().__init__(message, code, details)


# Not found

class NotFoundError(FulfillmentNetworkError):
    """Exception raised when a referenced entity does not exist."""

    default_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, message=None, code=None, details=None, identifier=None):
        self.identifier = identifier
        super().__init__(message, code, details)


class ProductNotFoundError(NotFoundError):
    default_code = ErrorCode.PRODUCT_NOT_FOUND

    def __init__(self, product_id):
        super().__init__(f"Product with id {product_id} not found", identifier=product_id)


class StoreNotFoundError(NotFoundError):
    default_code = ErrorCode.STORE_NOT_FOUND

    def __init__(self, store_id):
        super().__init__(f"Store with id {store_id} not found", identifier=store_id)


class WarehouseNotFoundError(NotFoundError):
    """Raised when no warehouse matches a business unit code or surrogate id."""

    default_code = ErrorCode.WAREHOUSE_NOT_FOUND

    def __init__(self, business_unit_code=None, warehouse_id=None):
        if warehouse_id is not None:
            message = f"Warehouse with id {warehouse_id} not found"
            identifier = warehouse_id
        else:
            message = f"Warehouse with business unit code {business_unit_code} not found"
            identifier = business_unit_code
        super().__init__(message, identifier=identifier)


class LocationNotFoundError(NotFoundError):
    default_code = ErrorCode.LOCATION_NOT_FOUND

    def __init__(self, identifier, message=None):
        message = message or f"Location with identifier {identifier if identifier is not None else ''} not found."
        super().__init__(message, identifier=identifier)


class FulfillmentNotFoundError(NotFoundError):
    default_code = ErrorCode.FULFILLMENT_NOT_FOUND


# Validation

class ValidationError(FulfillmentNetworkError):
    """Exception raised when a request breaks a business invariant.

    ``violations`` holds every individual reason found in the same pass.
    """

    default_code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message=None, code=None, details=None, violations=None):
        self.violations = list(violations or [])
        if details is None and self.violations:
            details = {'violations': self.violations}
        super().__init__(message, code, details)


class CapacityExceededError(ValidationError):
    default_code = ErrorCode.CAPACITY_EXCEEDED


class StockMismatchError(ValidationError):
    default_code = ErrorCode.STOCK_MISMATCH


class DuplicateResourceError(ValidationError):
    """Raised when an identity (business unit code, association triple) already exists."""

    default_code = ErrorCode.DUPLICATE_RESOURCE
