"""
Session service - signed session tokens carrying the role claim.

A session is a JWT issued at login. Logout records the token id in
`revoked_tokens`, so the token stops working before it expires.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from foodsync.config import get_settings
from foodsync.models.account import Account, RevokedToken, Role
from foodsync.services.exceptions import SessionInvalid
from foodsync.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionClaims:
    account_id: int
    role: Role
    email: str
    jti: str
    expires_at: datetime


def issue_session(account: Account, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    """Create a signed token for an authenticated account"""
    now = datetime.now(timezone.utc)
    expires_at = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {
        "sub": str(account.id),
        "role": Role(account.role).value,
        "email": account.email,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return token, expires_at


def decode_session(token: str) -> SessionClaims:
    """Verify signature and expiry and return the claims"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise SessionInvalid(f"Invalid session token: {e}")

    try:
        return SessionClaims(
            account_id=int(payload["sub"]),
            role=Role(payload["role"]),
            email=payload.get("email", ""),
            jti=payload["jti"],
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (KeyError, ValueError, TypeError):
        raise SessionInvalid("Session token is missing required claims")


async def is_revoked(db: AsyncSession, jti: str) -> bool:
    result = await db.execute(select(RevokedToken.id).where(RevokedToken.jti == jti))
    return result.scalar_one_or_none() is not None


async def cleanup_expired_sessions(db: AsyncSession) -> int:
    """Drop revocation records for tokens that have expired anyway"""
    result = await db.execute(
        delete(RevokedToken)
        .where(RevokedToken.expires_at < datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if result.rowcount:
        logger.info(f"Pruned {result.rowcount} expired revoked sessions")
    return result.rowcount


async def revoke_session(db: AsyncSession, claims: SessionClaims) -> None:
    """End a session; repeated logout with the same token is a no-op"""
    await cleanup_expired_sessions(db)
    if await is_revoked(db, claims.jti):
        return
    db.add(RevokedToken(
        jti=claims.jti,
        account_id=claims.account_id,
        expires_at=claims.expires_at,
    ))
    await db.commit()
    logger.info(f"Session {claims.jti} revoked for account {claims.account_id}")
