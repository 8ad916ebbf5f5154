"""Services package exports."""

from courier.services.auth_service import AuthService
from courier.services.credential_service import CredentialService
from courier.services.logging_service import configure_logging, get_logger
from courier.services.message_service import MessageService
from courier.services.messaging_service import MessagingService
from courier.services.token_service import TokenService
from courier.services.user_service import UserService

__all__ = [
    "AuthService",
    "CredentialService",
    "MessageService",
    "MessagingService",
    "TokenService",
    "UserService",
    "configure_logging",
    "get_logger",
]
