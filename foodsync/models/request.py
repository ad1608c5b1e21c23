"""
Cross-role request models - food, packing and pickup requests.

The three kinds live in separate tables but share one column set and one
status lifecycle (see services.request_lifecycle).
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func
from foodsync.database import Base
from enum import Enum


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class RequestMixin:
    """Columns common to every request table"""

    id = Column(Integer, primary_key=True, index=True)
    request_title = Column(String, nullable=False)
    request_description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)

    @declared_attr
    def status(cls):
        return Column(
            SQLEnum(RequestStatus, native_enum=False),
            nullable=False,
            default=RequestStatus.PENDING,
            index=True,
        )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class FoodRequest(RequestMixin, Base):
    """NGO asks a restaurant for surplus food"""
    __tablename__ = "food_requests"

    ngo_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)


class PackingRequest(RequestMixin, Base):
    """Restaurant or NGO asks a packing company for packaging"""
    __tablename__ = "packing_requests"

    requester_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    requester_role = Column(String, nullable=False)  # "restaurant" | "ngo"
    packing_company_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)


class PickupRequest(RequestMixin, Base):
    """Restaurant asks an NGO to pick up surplus food"""
    __tablename__ = "pickup_requests"

    restaurant_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    ngo_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
