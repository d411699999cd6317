"""
Error taxonomy of the evolution kernel.

None of these errors is transient: every one of them asks the caller to
correct the request (authenticate, pick a valid id, wait for a pending
evolution). Nothing here is retried automatically.
"""


class EvolutionKernelError(Exception):
    """Base class. ``code`` is the machine-readable reason."""

    code = "evolution_kernel_error"

    def __init__(self, detail: str = ""):
        self.detail = detail or self.__class__.__doc__ or self.code
        super().__init__(self.detail)


class Unauthenticated(EvolutionKernelError):
    """No authenticated identity."""

    code = "unauthenticated"


class UserNotFound(EvolutionKernelError):
    """Authenticated identity matches no platform user."""

    code = "user_not_found"


class Forbidden(EvolutionKernelError):
    """Authenticated user lacks the role required for this operation."""

    code = "forbidden"


class NotFound(EvolutionKernelError):
    """Referenced record does not exist."""

    code = "not_found"


class AlreadyProcessed(EvolutionKernelError):
    """Evolution is no longer pending."""

    code = "already_processed"


class UnsupportedCategory(ValueError):
    """Category has no parameter set (``content_rules``, ``other``)."""
