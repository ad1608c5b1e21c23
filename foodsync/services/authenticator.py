"""
Role authenticator - resolves (email, password, role) to an account.

Passwords are stored as salted bcrypt hashes; comparison happens inside
bcrypt.checkpw, which is constant time.
"""
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from foodsync.config import get_settings
from foodsync.models.account import Account, Role, normalize_email
from foodsync.services.exceptions import (
    ValidationFailed, InvalidRole, InvalidCredentials, DuplicateAccount,
)
from foodsync.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)


def hash_password(password: str) -> str:
    if not password:
        raise ValidationFailed("Password cannot be empty")
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or over-long password
        logger.warning("Password verification failed on malformed input")
        return False


def parse_role(role) -> Role:
    """Map a claimed role tag to a Role, raising InvalidRole when unknown"""
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role).strip().lower())
    except ValueError:
        raise InvalidRole(role)


async def find_accounts_by_email(db: AsyncSession, email: str, role: Role) -> list[Account]:
    """All accounts of a role whose email matches case-insensitively, oldest first"""
    result = await db.execute(
        select(Account)
        .where(
            Account.role == role,
            Account.email_lookup == normalize_email(email),
        )
        .order_by(Account.id)
    )
    return list(result.scalars().all())


async def authenticate(db: AsyncSession, email: str, password: str, role) -> Account:
    """
    Return the account of `role` matching email and password.

    Several rows may share an email; the first one whose password verifies
    wins, so a duplicate never shadows the account the password belongs to.
    """
    if not email or not email.strip() or not password:
        raise ValidationFailed("Email and password are required")

    claimed_role = parse_role(role)

    for account in await find_accounts_by_email(db, email, claimed_role):
        if verify_password(password, account.password_hash):
            logger.info(f"Authenticated {claimed_role.value} account {account.id}")
            return account

    logger.info(f"Failed {claimed_role.value} login for {normalize_email(email)}")
    raise InvalidCredentials()


async def register_account(
    db: AsyncSession,
    *,
    role,
    display_name: str,
    email: str,
    password: str,
    phone_number: Optional[str] = None,
    address: Optional[str] = None,
    description: Optional[str] = None,
    contact_person: Optional[str] = None,
    specialty: Optional[str] = None,
    verified: bool = False,
) -> Account:
    """Create an account, refusing an email already used within the same role"""
    account_role = parse_role(role)
    if not display_name or not display_name.strip():
        raise ValidationFailed("Name is required")
    if not email or not email.strip() or not password:
        raise ValidationFailed("Email and password are required")

    if await find_accounts_by_email(db, email, account_role):
        raise DuplicateAccount(f"A {account_role.value} account with this email already exists")

    account = Account(
        role=account_role,
        display_name=display_name.strip(),
        email=email.strip(),
        password_hash=hash_password(password),
        phone_number=phone_number,
        address=address,
        description=description,
        contact_person=contact_person,
        specialty=specialty,
        verified=verified,
    )
    db.add(account)
    await db.commit()
    await db.refresh(account)
    logger.info(f"Registered {account_role.value} account {account.id}")
    return account
