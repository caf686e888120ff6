"""
Privileged-caller check for mutating endpoints.
Tokens are issued elsewhere; here we only verify the signature, expiry and role claim.
"""
import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eventmap.config import Settings, get_settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    """Verify a bearer token and return its claims."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=403, detail="Invalid token")


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Dependency: reject the request unless it carries an admin token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing or malformed token")

    claims = decode_token(credentials.credentials, settings)
    if claims.get("role") != settings.admin_role:
        client = request.client.host if request.client else "unknown"
        logger.warning(
            f"Non-admin caller '{claims.get('username')}' denied {request.method} {request.url.path} from {client}"
        )
        raise HTTPException(status_code=403, detail="Admin only")
    return claims
