"""User registration service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model

from .exceptions import UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    name: str = "",
    phone: str = "",
) -> User:
    """
    Register a new user account.

    Args:
        email: User's email address (normalised to lowercase)
        password: User's password (will be hashed)
        name: Optional full name
        phone: Optional phone number

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is taken
    """
    email = email.lower().strip()
    if User.objects.filter(email=email).exists():
        raise UserRegistrationError("A user with this email already exists")

    user = User.objects.create_user(
        email=email,
        password=password,
        name=name.strip(),
        phone=phone.strip(),
    )
    logger.info("Registered user %s", user.id)
    return user
