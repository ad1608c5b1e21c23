"""
Input validation utilities
"""
from datetime import datetime, timezone
from typing import Optional


def validate_future_date(due_date: datetime) -> datetime:
    """Validate that a due date is in the future; naive values are taken as UTC"""
    if due_date.tzinfo is None:
        due_date = due_date.replace(tzinfo=timezone.utc)
    if due_date <= datetime.now(timezone.utc):
        raise ValueError("Due date must be in the future")
    return due_date


def validate_quantity(quantity: int) -> int:
    """Validate quantity is a positive integer"""
    if quantity < 1:
        raise ValueError("Quantity must be at least 1")
    return quantity


def validate_rating(rating: int) -> int:
    if not 1 <= rating <= 5:
        raise ValueError("Rating must be between 1 and 5")
    return rating


def validate_password_length(password: str) -> str:
    """bcrypt only looks at the first 72 bytes"""
    if len(password.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes")
    return password


def split_comma_list(value: Optional[str | list[str]]) -> list[str]:
    """Turn 'pizza, pasta,,sushi' into ['pizza', 'pasta', 'sushi']"""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [item.strip() for item in value if item and item.strip()]
