"""
Demo seed script tests
"""
from sqlalchemy import select, func

from foodsync.models.account import Account, Role
from foodsync.models.menu_item import MenuItem
from foodsync.services.authenticator import hash_password
from scripts.setup_db import DEMO_ACCOUNTS, DEMO_MENU, seed_demo_data


async def test_seed_creates_one_account_per_role(db_session):
    created = await seed_demo_data(db_session)
    assert sorted(a.role.value for a in created) == sorted(r.value for r, _, _, _ in DEMO_ACCOUNTS)

    result = await db_session.execute(select(func.count(MenuItem.id)))
    assert result.scalar() == len(DEMO_MENU)


async def test_seed_skips_existing_default_admin(db_session):
    # What the app's startup seeds before the script ever runs
    db_session.add(Account(
        role=Role.ADMIN, display_name="Administrator", email="admin@foodsync.local",
        password_hash=hash_password("admin123"), verified=True,
    ))
    await db_session.commit()

    created = await seed_demo_data(db_session)
    assert Role.ADMIN not in {a.role for a in created}

    result = await db_session.execute(
        select(func.count(Account.id)).where(Account.email_lookup == "admin@foodsync.local")
    )
    assert result.scalar() == 1


async def test_seed_twice_adds_nothing(db_session):
    await seed_demo_data(db_session)
    assert await seed_demo_data(db_session) == []

    result = await db_session.execute(select(func.count(Account.id)))
    assert result.scalar() == len(DEMO_ACCOUNTS)
    result = await db_session.execute(select(func.count(MenuItem.id)))
    assert result.scalar() == len(DEMO_MENU)
