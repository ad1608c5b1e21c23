"""
Database setup script - creates tables and one demo account per role
"""
import asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from foodsync.database import AsyncSessionLocal, create_tables
from foodsync.models import Account, Role, MenuItem
from foodsync.services.authenticator import hash_password, find_accounts_by_email

DEMO_PASSWORD = "demo1234"

DEMO_ACCOUNTS = [
    (Role.ADMIN, "Administrator", "admin@foodsync.local", {}),
    (Role.RESTAURANT, "Green Bistro", "bistro@foodsync.local", {
        "address": "12 Market St",
        "description": "Seasonal plates, zero-waste kitchen",
    }),
    (Role.NGO, "Feed the City", "ngo@foodsync.local", {
        "contact_person": "Asha Rao",
        "specialty": "Homeless shelters",
    }),
    (Role.USER, "Sam Diner", "sam@foodsync.local", {}),
    (Role.PACKING, "BoxIt Packaging", "boxit@foodsync.local", {"address": "4 Dock Rd"}),
]

DEMO_MENU = [
    dict(name="Lentil Soup", price=6.5, is_vegetarian=True, is_vegan=True, carbon_footprint=0.3),
    dict(name="Roast Chicken", price=14.0, carbon_footprint=3.2),
    dict(name="Mushroom Risotto", price=12.5, is_vegetarian=True, carbon_footprint=1.1),
]


async def seed_demo_data(session: AsyncSession) -> list[Account]:
    """Insert the demo accounts that are missing; returns the ones created"""
    created = []
    for role, name, email, profile in DEMO_ACCOUNTS:
        # The app seeds its own admin on startup, possibly with the same email
        if await find_accounts_by_email(session, email, role):
            print(f"  skipping {role.value} {email}: already exists")
            continue
        account = Account(
            role=role,
            display_name=name,
            email=email,
            password_hash=hash_password(DEMO_PASSWORD),
            verified=True,
            **profile,
        )
        session.add(account)
        created.append(account)
    await session.flush()

    restaurant = next((a for a in created if a.role == Role.RESTAURANT), None)
    if restaurant is not None:
        session.add_all([MenuItem(restaurant_id=restaurant.id, **item) for item in DEMO_MENU])

    await session.commit()
    return created


async def setup_database():
    """Create tables and seed demo data"""
    print("Creating database tables...")
    await create_tables()
    print("Tables created")

    async with AsyncSessionLocal() as session:
        created = await seed_demo_data(session)
        print(f"Seed data created ({len(created)} accounts)")

    print("\nDatabase setup complete!")
    print("\nDemo logins (password for all: %s):" % DEMO_PASSWORD)
    for role, _, email, _ in DEMO_ACCOUNTS:
        print(f"  {role.value:<10} {email}")


if __name__ == "__main__":
    asyncio.run(setup_database())
