"""
Admin API Key Authentication

Validates admin API keys for staff tooling and internal service integrations.
A valid key resolves to the Operator caller.
"""

from uuid import UUID

from fastapi import status
from libs.result import Error
from src.api.error import ClientError
from src.domain.authorization import Operator
from config import ApplicationConfig

# Actor recorded for requests authenticated by the admin key
ADMIN_KEY_OPERATOR = Operator(user_id=UUID(int=1))


def check_admin_api_key(x_admin_api_key: str) -> Operator:
    """
    Validate an admin API key.

    Raises:
        ClientError: 401 if key is invalid
    """
    valid_admin_key = getattr(ApplicationConfig, "ADMIN_API_KEY", None)

    if not valid_admin_key or x_admin_api_key != valid_admin_key:
        raise ClientError(
            Error("INVALID_API_KEY", "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return ADMIN_KEY_OPERATOR
