"""Services for support tickets."""

from .exceptions import (
    SupportServiceError,
    TicketNotFoundError,
    TicketValidationError,
    TicketPermissionError,
)
from .ticket_management import (
    generate_ticket_number,
    create_ticket,
    list_tickets,
    get_ticket,
    visible_comments,
    update_ticket_status,
    assign_ticket,
    add_comment,
)

__all__ = [
    # Exceptions
    'SupportServiceError',
    'TicketNotFoundError',
    'TicketValidationError',
    'TicketPermissionError',
    # Tickets
    'generate_ticket_number',
    'create_ticket',
    'list_tickets',
    'get_ticket',
    'visible_comments',
    'update_ticket_status',
    'assign_ticket',
    'add_comment',
]
