"""
Support tickets.

Any user can raise a ticket and follow it; platform admins triage, assign
and close them and may leave internal notes the reporter never sees.
"""

import logging
import time
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from django.utils.crypto import get_random_string
from django.utils.http import int_to_base36

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.businesses.models import Business, BusinessRole
from apps.support.models import SupportTicket, TicketComment, TicketPriority, TicketStatus

from .exceptions import TicketNotFoundError, TicketPermissionError, TicketValidationError

logger = logging.getLogger(__name__)

TICKET_SUFFIX_CHARS = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'


def generate_ticket_number() -> str:
    """``TKT-`` + base36 epoch milliseconds + 4 random characters."""
    stamp = int_to_base36(int(time.time() * 1000)).upper()
    return f"TKT-{stamp}{get_random_string(4, TICKET_SUFFIX_CHARS)}"


def _admin_business(user: User) -> Optional[Business]:
    return (
        Business.objects
        .filter(
            members__user=user,
            members__role=BusinessRole.BUSINESS_ADMIN,
            members__is_active=True,
        )
        .order_by('created_at')
        .first()
    )


@transaction.atomic
def create_ticket(
    *,
    actor: User,
    subject: str,
    description: str,
    priority: str = TicketPriority.MEDIUM,
    category: str = 'GENERAL',
) -> SupportTicket:
    subject = (subject or '').strip()
    description = (description or '').strip()
    if not subject or not description:
        raise TicketValidationError("Subject and description are required")
    if priority not in TicketPriority.values:
        raise TicketValidationError("Invalid priority")

    ticket = SupportTicket.objects.create(
        ticket_number=generate_ticket_number(),
        subject=subject,
        description=description,
        priority=priority,
        category=(category or 'GENERAL').strip().upper(),
        business=_admin_business(actor),
        created_by=actor,
    )

    log_action(
        action='TICKET_CREATED',
        entity=ticket,
        actor=actor,
        metadata={'ticketNumber': ticket.ticket_number, 'subject': subject, 'priority': priority},
    )
    logger.info("Ticket %s opened by %s", ticket.ticket_number, actor.email)
    return ticket


def list_tickets(*, user: User, status: Optional[str] = None, priority: Optional[str] = None):
    """
    Tickets visible to ``user`` plus open/urgent counters.

    Returns ``(queryset, counts)``.
    """
    queryset = SupportTicket.objects.select_related('business', 'created_by', 'assigned_to')
    if not user.is_platform_admin:
        queryset = queryset.filter(created_by=user)

    counts = queryset.aggregate(
        openCount=Count('id', filter=Q(status=TicketStatus.OPEN)),
        urgentCount=Count(
            'id',
            filter=Q(priority=TicketPriority.URGENT) & ~Q(status__in=[TicketStatus.RESOLVED, TicketStatus.CLOSED]),
        ),
    )

    if user.is_platform_admin:
        if status:
            queryset = queryset.filter(status=status)
        if priority:
            queryset = queryset.filter(priority=priority)
    return queryset.order_by('-created_at'), counts


def get_ticket(*, user: User, ticket_id: UUID) -> SupportTicket:
    queryset, _ = list_tickets(user=user)
    ticket = queryset.filter(id=ticket_id).first()
    if ticket is None:
        raise TicketNotFoundError("Ticket not found")
    return ticket


def visible_comments(*, ticket: SupportTicket, user: User):
    comments = ticket.comments.select_related('author')
    if not user.is_platform_admin:
        comments = comments.filter(is_internal=False)
    return comments


def _lock_ticket(ticket_id: UUID) -> SupportTicket:
    ticket = SupportTicket.objects.select_for_update().filter(id=ticket_id).first()
    if ticket is None:
        raise TicketNotFoundError("Ticket not found")
    return ticket


@transaction.atomic
def update_ticket_status(*, actor: User, ticket_id: UUID, status: str) -> SupportTicket:
    if status not in TicketStatus.values:
        raise TicketValidationError("Invalid status")

    ticket = _lock_ticket(ticket_id)
    previous = ticket.status
    ticket.status = status
    now = timezone.now()
    if status == TicketStatus.RESOLVED:
        ticket.resolved_at = now
    elif status == TicketStatus.CLOSED:
        ticket.closed_at = now
    ticket.save()

    log_action(
        action='TICKET_STATUS_UPDATED',
        entity=ticket,
        actor=actor,
        metadata={'ticketNumber': ticket.ticket_number, 'previousStatus': previous, 'newStatus': status},
    )
    return ticket


@transaction.atomic
def assign_ticket(*, actor: User, ticket_id: UUID, assignee_id: Optional[UUID]) -> SupportTicket:
    ticket = _lock_ticket(ticket_id)
    assignee = None
    if assignee_id:
        assignee = User.objects.filter(id=assignee_id, is_superuser=True, is_active=True).first()
        if assignee is None:
            raise TicketValidationError("Assignee must be a platform admin")

    ticket.assigned_to = assignee
    if assignee is not None and ticket.status == TicketStatus.OPEN:
        ticket.status = TicketStatus.IN_PROGRESS
    ticket.save(update_fields=['assigned_to', 'status', 'updated_at'])

    log_action(
        action='TICKET_ASSIGNED',
        entity=ticket,
        actor=actor,
        metadata={
            'ticketNumber': ticket.ticket_number,
            'assignedTo': assignee.email if assignee else None,
        },
    )
    return ticket


@transaction.atomic
def add_comment(*, actor: User, ticket_id: UUID, content: str, is_internal: bool = False) -> TicketComment:
    """
    Raises:
        TicketNotFoundError: Ticket not visible to the caller
        TicketPermissionError: Internal note by a non-admin
        TicketValidationError: Empty comment, or reporter commenting on a closed ticket
    """
    content = (content or '').strip()
    if not content:
        raise TicketValidationError("Comment cannot be empty")

    ticket = get_ticket(user=actor, ticket_id=ticket_id)
    if is_internal and not actor.is_platform_admin:
        raise TicketPermissionError("Only platform admins can add internal notes")
    if ticket.status == TicketStatus.CLOSED and not actor.is_platform_admin:
        raise TicketValidationError("Ticket is closed")

    comment = TicketComment.objects.create(
        ticket=ticket,
        author=actor,
        content=content,
        is_internal=is_internal,
    )
    SupportTicket.objects.filter(id=ticket.id).update(updated_at=timezone.now())

    log_action(
        action='TICKET_COMMENT_ADDED',
        entity=ticket,
        actor=actor,
        metadata={'ticketNumber': ticket.ticket_number, 'isInternal': is_internal},
    )
    return comment
