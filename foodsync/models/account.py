"""
Account model - one table for every role, with a role discriminant
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Enum as SQLEnum
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
from foodsync.database import Base
from enum import Enum


class Role(str, Enum):
    RESTAURANT = "restaurant"
    NGO = "ngo"
    USER = "user"
    PACKING = "packing"
    ADMIN = "admin"


class Capability(str, Enum):
    OWN_MENU = "own_menu"
    REQUEST_FOOD = "request_food"
    FULFILL_FOOD = "fulfill_food"
    REQUEST_PACKING = "request_packing"
    FULFILL_PACKING = "fulfill_packing"
    REQUEST_PICKUP = "request_pickup"
    FULFILL_PICKUP = "fulfill_pickup"
    RATE_RESTAURANTS = "rate_restaurants"
    PLACE_ORDERS = "place_orders"
    MANAGE_ACCOUNTS = "manage_accounts"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.RESTAURANT: frozenset({
        Capability.OWN_MENU,
        Capability.FULFILL_FOOD,
        Capability.REQUEST_PACKING,
        Capability.REQUEST_PICKUP,
    }),
    Role.NGO: frozenset({
        Capability.REQUEST_FOOD,
        Capability.REQUEST_PACKING,
        Capability.FULFILL_PICKUP,
    }),
    Role.PACKING: frozenset({Capability.FULFILL_PACKING}),
    Role.USER: frozenset({Capability.RATE_RESTAURANTS, Capability.PLACE_ORDERS}),
    Role.ADMIN: frozenset({Capability.MANAGE_ACCOUNTS}),
}

# Where each role lands after login
ROLE_DASHBOARDS: dict[Role, str] = {
    Role.RESTAURANT: "/restaurant-dashboard",
    Role.NGO: "/ngo-dashboard",
    Role.USER: "/user-dashboard",
    Role.PACKING: "/packing-dashboard",
    Role.ADMIN: "/admin-dashboard",
}


def normalize_email(email: str) -> str:
    return email.strip().lower()


class Account(Base):
    """Restaurant, NGO, individual user, packing company or admin"""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(SQLEnum(Role, native_enum=False), nullable=False, index=True)

    # Identity
    display_name = Column(String, nullable=False)
    # Not unique: legacy data may hold duplicates, see authenticator
    email = Column(String, nullable=False)
    # Lowercased in Python; SQLite lower() only folds ASCII
    email_lookup = Column(String, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    address = Column(String, nullable=True)

    # Role-specific profile fields
    description = Column(Text, nullable=True)  # restaurants
    contact_person = Column(String, nullable=True)  # NGOs
    specialty = Column(String, nullable=True)  # NGOs

    verified = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @validates("email")
    def _set_email_lookup(self, key, value):
        self.email_lookup = normalize_email(value)
        return value

    @property
    def capabilities(self) -> frozenset[Capability]:
        return ROLE_CAPABILITIES.get(Role(self.role), frozenset())

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @property
    def dashboard(self) -> str:
        return ROLE_DASHBOARDS[Role(self.role)]


class RevokedToken(Base):
    """Session tokens ended by logout before their expiry"""
    __tablename__ = "revoked_tokens"

    id = Column(Integer, primary_key=True, index=True)
    jti = Column(String, unique=True, nullable=False, index=True)
    account_id = Column(Integer, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    revoked_at = Column(DateTime(timezone=True), server_default=func.now())
