"""
Account profile endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from pydantic import BaseModel, Field

from foodsync.database import get_db
from foodsync.models.account import Account
from foodsync.api.auth import get_current_account, account_response, AccountResponse

router = APIRouter()


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(default=None, min_length=1)
    phone_number: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    contact_person: Optional[str] = None
    specialty: Optional[str] = None


@router.put("/me", response_model=AccountResponse)
async def update_my_profile(
    data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """Update the caller's own profile; email, role and password are not editable here"""
    updates = data.model_dump(exclude_none=True)
    for key, value in updates.items():
        setattr(current_account, key, value)

    await db.commit()
    await db.refresh(current_account)
    return account_response(current_account)
