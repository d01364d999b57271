"""Domain errors raised by the service layer."""


class YardOpsError(Exception):
    """Base class for service-layer errors."""


class NotFoundError(YardOpsError):
    """A referenced entity does not exist."""


class ConflictError(YardOpsError):
    """The operation would violate a uniqueness rule."""


class PermissionDeniedError(YardOpsError):
    """The acting user may not perform the operation."""
