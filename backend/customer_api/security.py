"""
Customer API — API Key Security Dependency
===========================================

What:  Optional shared-secret check on the X-API-Key header.
How:   Declared through FastAPI's APIKeyHeader so the scheme is published in
       the OpenAPI document and Swagger UI offers an "Authorize" button.
       When API_KEY is empty the check is a no-op.
"""

import secrets
from typing import Optional

from fastapi import Security
from fastapi.security import APIKeyHeader

from customer_api.config import settings
from customer_api.exceptions import AuthenticationError

api_key_header = APIKeyHeader(
    name="X-API-Key",
    auto_error=False,
    description="Shared API key; required only when the server sets API_KEY",
)


async def require_api_key(api_key: Optional[str] = Security(api_key_header)) -> None:
    """Raises AuthenticationError when a key is configured and not presented."""
    expected = settings.api_key
    if not expected:
        return
    if api_key is None or not secrets.compare_digest(api_key.encode(), expected.encode()):
        raise AuthenticationError()
