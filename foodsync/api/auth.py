"""
Authentication endpoints and session dependencies
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from foodsync.database import get_db
from foodsync.models.account import Account, Role, Capability
from foodsync.services import authenticator, session_service
from foodsync.services.exceptions import (
    ValidationFailed, InvalidRole, InvalidCredentials, DuplicateAccount, SessionInvalid,
)
from foodsync.utils.validators import validate_password_length

router = APIRouter()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Not authenticated",
    headers={"WWW-Authenticate": "Bearer"},
)


# --- Pydantic Schemas ---

class LoginRequest(BaseModel):
    email: str
    password: str
    role: str


class AccountResponse(BaseModel):
    id: int
    role: Role
    display_name: str
    email: str
    phone_number: Optional[str]
    address: Optional[str]
    description: Optional[str]
    contact_person: Optional[str]
    specialty: Optional[str]
    verified: bool
    created_at: Optional[datetime]
    dashboard: str
    capabilities: list[Capability]

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    role: Role
    dashboard: str
    account: AccountResponse


class RegisterRequest(BaseModel):
    role: str
    display_name: str
    email: str
    password: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    contact_person: Optional[str] = None
    specialty: Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return validate_password_length(v)


# --- Helpers ---

def account_response(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        role=account.role,
        display_name=account.display_name,
        email=account.email,
        phone_number=account.phone_number,
        address=account.address,
        description=account.description,
        contact_person=account.contact_person,
        specialty=account.specialty,
        verified=bool(account.verified),
        created_at=account.created_at,
        dashboard=account.dashboard,
        capabilities=sorted(account.capabilities, key=lambda c: c.value),
    )


# --- Dependencies ---

async def get_session_claims(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> session_service.SessionClaims:
    if not token:
        raise CREDENTIALS_EXCEPTION
    try:
        claims = session_service.decode_session(token)
    except SessionInvalid:
        raise CREDENTIALS_EXCEPTION
    if await session_service.is_revoked(db, claims.jti):
        raise CREDENTIALS_EXCEPTION
    return claims


async def get_current_account(
    claims: session_service.SessionClaims = Depends(get_session_claims),
    db: AsyncSession = Depends(get_db),
) -> Account:
    account = await db.get(Account, claims.account_id)
    if account is None or Role(account.role) != claims.role:
        raise CREDENTIALS_EXCEPTION
    return account


def require_role(*roles: Role):
    """Dependency factory: the caller must hold one of `roles`"""

    async def dependency(account: Account = Depends(get_current_account)) -> Account:
        if Role(account.role) not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(r.value for r in roles)}",
            )
        return account

    return dependency


def require_capability(capability: Capability):
    """Dependency factory: the caller's role must grant `capability`"""

    async def dependency(account: Account = Depends(get_current_account)) -> Account:
        if not account.can(capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not allowed: {capability.value}",
            )
        return account

    return dependency


# --- Endpoints ---

@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate against the claimed role and open a session"""
    try:
        account = await authenticator.authenticate(db, data.email, data.password, data.role)
    except InvalidRole as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ValidationFailed as e:
        raise HTTPException(status_code=422, detail=e.message)
    except InvalidCredentials as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    token, expires_at = session_service.issue_session(account)
    return TokenResponse(
        access_token=token,
        expires_at=expires_at,
        role=account.role,
        dashboard=account.dashboard,
        account=account_response(account),
    )


@router.post("/register", response_model=AccountResponse)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Self-service registration; admin accounts are created by admins only"""
    try:
        role = authenticator.parse_role(data.role)
    except InvalidRole as e:
        raise HTTPException(status_code=400, detail=e.message)
    if role == Role.ADMIN:
        raise HTTPException(status_code=403, detail="Admin accounts cannot self-register")

    try:
        account = await authenticator.register_account(db, **data.model_dump())
    except DuplicateAccount as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ValidationFailed as e:
        raise HTTPException(status_code=422, detail=e.message)
    return account_response(account)


@router.get("/me", response_model=AccountResponse)
async def get_me(current_account: Account = Depends(get_current_account)):
    return account_response(current_account)


@router.post("/logout")
async def logout(
    claims: session_service.SessionClaims = Depends(get_session_claims),
    db: AsyncSession = Depends(get_db),
):
    """End the current session"""
    await session_service.revoke_session(db, claims)
    return {"message": "Logged out"}
