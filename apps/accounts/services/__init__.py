"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    PasswordChangeError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user
from .account_management import change_password, update_profile

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'PasswordChangeError',
    # Services
    'register_user',
    'authenticate_user',
    'change_password',
    'update_profile',
]
