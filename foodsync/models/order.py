"""
User order model
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from foodsync.database import Base


class UserOrder(Base):
    __tablename__ = "user_orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

    # [{menu_item_id, name, price, quantity, total}]
    items = Column(JSON, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(String, nullable=False, default="completed")

    order_date = Column(DateTime(timezone=True), server_default=func.now(), index=True)
