class AppException(Exception):
    """Base application exception."""

    pass


class NotFoundError(AppException):
    """Resource not found exception."""

    pass


class ValidationError(AppException):
    """Validation error exception."""

    pass


class ProcessingError(AppException):
    """Processing error exception."""

    pass


class GatewayError(AppException):
    """Payment gateway communication error."""

    def __init__(self, message: str, status_code: int = None, payload: dict = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class LockNotAcquiredError(AppException):
    """Raised when a resource is claimed by another worker."""

    def __init__(self, resource_key: str):
        super().__init__(f"Lock not acquired for {resource_key}")
        self.resource_key = resource_key
