"""
Service exceptions

Routers translate these into HTTP responses; business-rule failures of
bidding and payments use result objects instead.
"""


class ServiceError(Exception):
    """Base exception for service errors"""
    status_code = 400


class NotFoundError(ServiceError):
    """Raised when the requested row doesn't exist"""
    status_code = 404


class ValidationError(ServiceError):
    """Raised when input breaks a business rule"""
    status_code = 400


class InvalidTransitionError(ServiceError):
    """Raised when a status change is not allowed from the current status"""
    status_code = 409


class ConflictError(ServiceError):
    """Raised on uniqueness conflicts (duplicate email, name, ...)"""
    status_code = 409
