"""Custom exceptions for the procurement application."""


class AppError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class ValidationError(AppError):
    """Raised for malformed or out-of-range input."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class NotFoundError(AppError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class ConflictError(AppError):
    """Raised on a uniqueness violation or a delete blocked by references."""
    def __init__(self, message, payload=None):
        super().__init__(message, 409, payload)
