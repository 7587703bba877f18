"""Input checks shared by tenancy services."""

import re

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from .exceptions import BusinessValidationError

SLUG_REGEX = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
MIN_PASSWORD_LENGTH = 8


def normalize_slug(value, *, label):
    slug = (value or '').strip().lower()
    if not slug:
        raise BusinessValidationError(f"{label} slug is required")
    if not SLUG_REGEX.match(slug):
        raise BusinessValidationError(
            f"{label} slug must contain only lowercase letters, numbers, and hyphens"
        )
    return slug


def normalize_email(value, *, message="Valid email is required"):
    email = (value or '').strip().lower()
    try:
        validate_email(email)
    except ValidationError:
        raise BusinessValidationError(message)
    return email


def require_password(value):
    if not value or len(value) < MIN_PASSWORD_LENGTH:
        raise BusinessValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    return value
