"""
Bearer token verification.

Tokens are JWTs issued by the SPA's login flow and carry the caller's
email, name, role and department as claims. Role claims are trusted, so
tokens must be signed with JWT_SECRET.
"""
import jwt
from fastapi import HTTPException, status

from app.core import config


def verify_jwt_token(token: str) -> dict:
    """
    Decode a bearer JWT and return its payload.
    
    The signature is checked against JWT_SECRET. Without a secret every token
    is refused, unless ALLOW_UNSIGNED_TOKENS is set for local development;
    expiry is always checked.
    
    Raises:
        HTTPException: If token is invalid or expired, or verification is not configured
    """
    if not config.JWT_SECRET and not config.ALLOW_UNSIGNED_TOKENS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token verification is not configured",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    try:
        if config.JWT_SECRET:
            payload = jwt.decode(
                token,
                config.JWT_SECRET,
                algorithms=["HS256"],
                options={"verify_exp": True},
            )
        else:
            payload = jwt.decode(
                token,
                options={"verify_signature": False, "verify_exp": True}
            )
        
        return payload
        
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
