class ServiceError(Exception):
    """General exception class for the service layer."""
    pass

class AuthorizationError(ServiceError):
    """The current user may not perform the operation."""
    pass

class NotFoundError(ServiceError):
    """A record the caller referred to does not exist."""
    pass

class ConflictError(ServiceError):
    """The operation clashes with data that already exists."""
    pass
