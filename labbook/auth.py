import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .config import AUTH_JWT_ALGORITHM, AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET
from .database import get_db
from .domain.roles.gate import is_admin
from .models import Profile
from .shared.errors import BackendUnavailable, Unauthorized

logger = logging.getLogger(__name__)

security = HTTPBearer()


@dataclass(frozen=True)
class AuthSession:
    """Authenticated caller, resolved once per request and passed to services explicitly"""

    user_id: str
    email: Optional[str] = None
    is_admin: bool = False


def verify_access_token(token: str) -> dict:
    """
    Verify an auth-provider access token (HS256 JWT) and return its claims.
    Signature, expiry and audience are all checked.
    """
    token_parts = token.split(".")
    if len(token_parts) != 3:
        logger.warning(
            f"⚠️ Malformed token received: {len(token_parts)} parts, token length: {len(token)}"
        )
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    try:
        claims = jwt.decode(
            token,
            AUTH_JWT_SECRET,
            algorithms=[AUTH_JWT_ALGORITHM],
            audience=AUTH_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"❌ Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e

    if not claims.get("sub"):
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return claims


def ensure_profile(db: Session, user_id: str, email: Optional[str]) -> Profile:
    """Find or create the profile row for an authenticated user"""
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile:
        if email and profile.email != email:
            profile.email = email
            db.commit()
        return profile

    logger.info(f"🆕 Creating profile for user: {user_id}")
    profile = Profile(id=user_id, email=email)
    db.add(profile)
    try:
        db.commit()
        db.refresh(profile)
    except IntegrityError:
        # Another request for the same user created it first
        db.rollback()
        profile = db.query(Profile).filter(Profile.id == user_id).first()
    return profile


def resolve_session(db: Session, token: str) -> AuthSession:
    """Build the session context for a raw bearer token"""
    claims = verify_access_token(token)
    user_id = claims["sub"]
    email = claims.get("email")

    ensure_profile(db, user_id, email)

    session = AuthSession(user_id=user_id, email=email, is_admin=is_admin(db, user_id))
    logger.debug(f"✅ User authenticated: {user_id} (admin={session.is_admin})")
    return session


def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> AuthSession:
    """Get the current session from the Authorization bearer token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    try:
        return resolve_session(db, credentials.credentials)
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        logger.error(f"❌ Session lookup failed: {e}")
        raise BackendUnavailable() from e
    except Exception as e:
        logger.error(f"❌ Authentication failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Authentication failed") from e


def get_admin_session(
    session: AuthSession = Depends(get_current_session),
) -> AuthSession:
    """
    Get current session and verify it belongs to an administrator.
    Use this dependency for every admin-only route.
    """
    if not session.is_admin:
        logger.warning(f"⚠️ User {session.user_id} attempted to access an admin route")
        raise Unauthorized()
    return session
