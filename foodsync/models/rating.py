"""
Restaurant ratings and user preference models
"""
from sqlalchemy import (
    Column, Integer, Float, Text, Boolean, DateTime, ForeignKey, JSON,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.sql import func
from foodsync.database import Base


class RestaurantRating(Base):
    """One user's rating of one restaurant"""
    __tablename__ = "restaurant_ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "restaurant_id", name="uq_rating_user_restaurant"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_rating_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    review = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("accounts.id"), unique=True, nullable=False)

    favorite_foods = Column(JSON, nullable=True)  # list[str]
    dietary_restrictions = Column(JSON, nullable=True)  # list[str]
    avg_quantity_ordered = Column(Float, nullable=True)
    family_members = Column(Integer, nullable=True)
    ac_preference = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
