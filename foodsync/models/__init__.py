from foodsync.models.account import Account, RevokedToken, Role, Capability
from foodsync.models.menu_item import MenuItem
from foodsync.models.request import FoodRequest, PackingRequest, PickupRequest, RequestStatus
from foodsync.models.rating import RestaurantRating, UserPreferences
from foodsync.models.order import UserOrder

__all__ = [
    "Account",
    "RevokedToken",
    "Role",
    "Capability",
    "MenuItem",
    "FoodRequest",
    "PackingRequest",
    "PickupRequest",
    "RequestStatus",
    "RestaurantRating",
    "UserPreferences",
    "UserOrder",
]
