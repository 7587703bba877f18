"""Domain exceptions for support tickets."""


class SupportServiceError(Exception):
    """Base exception for support service errors."""
    pass


class TicketNotFoundError(SupportServiceError):
    pass


class TicketValidationError(SupportServiceError):
    pass


class TicketPermissionError(SupportServiceError):
    """Caller may not act on this ticket (or add internal notes)."""
    pass
