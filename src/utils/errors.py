"""
PPE Safety Violation Tracker - Domain Errors

Raised by repositories, the statistics engine and the violation service;
mapped to HTTP status codes in api/middleware/error_handler.py.
"""


class ResourceNotFoundError(Exception):
    """Raised when an employee or violation id does not resolve."""

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found with id: {resource_id}")


class InvalidArgumentError(ValueError):
    """Raised when a request is rejected before touching the record store."""
    pass


class StoreUnavailableError(Exception):
    """Raised when a record store query fails. Transient; callers may retry."""
    pass
