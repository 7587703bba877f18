"""Account self-service: profile and password."""

import logging

from django.db import transaction

from apps.accounts.models import User
from apps.audit.services import log_action

from .exceptions import PasswordChangeError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@transaction.atomic
def change_password(*, user: User, current_password: str, new_password: str) -> User:
    """
    Change a user's password after verifying the current one.

    Raises:
        PasswordChangeError: If the current password is wrong or the new one is unusable
    """
    if not user.check_password(current_password):
        raise PasswordChangeError("Current password is incorrect")

    if len(new_password or '') < MIN_PASSWORD_LENGTH:
        raise PasswordChangeError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if current_password == new_password:
        raise PasswordChangeError("New password must be different from the current password")

    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])

    log_action(action='PASSWORD_CHANGED', entity=user, actor=user)
    logger.info("Password changed for user %s", user.id)
    return user


@transaction.atomic
def update_profile(*, user: User, name=None, phone=None) -> User:
    """Update the editable profile fields; None leaves a field unchanged."""
    if name is not None:
        user.name = name.strip()
    if phone is not None:
        user.phone = phone.strip()
    user.save(update_fields=['name', 'phone', 'updated_at'])
    return user
