"""Database seeding script (users, a group and a few expenses)"""
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.append(str(Path(__file__).parent.parent))

from app.core.logging import configure_logging
from app.core.security import hash_password
from app.database import AsyncSessionLocal, Base, engine
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.expense import ExpenseCreate
from app.schemas.group import GroupCreate
from app.schemas.split import SplitAllocation, SplitSpec
from app.services.expense_service import ExpenseService
from app.services.group_service import GroupService

PASSWORD = "password123"

USERS = [
    ("alice@example.com", "Alice"),
    ("bob@example.com", "Bob"),
    ("carol@example.com", "Carol"),
    ("dave@example.com", "Dave"),
]


async def create_tables():
    """Create all tables that don't exist yet"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_users(session) -> list:
    """Create the seed users, reusing ones that already exist"""
    users = []
    for email, name in USERS:
        existing_user = await UserRepository.get_by_email(session, email)
        if existing_user:
            print(f"  User '{email}' already exists, skipping...")
            users.append(existing_user)
            continue

        user = await UserRepository.create(session, User(
            email=email,
            name=name,
            hashed_password=hash_password(PASSWORD),
            is_active=True,
        ))
        print(f"  Created user '{name}' ({email})")
        users.append(user)

    await session.commit()
    return users


async def seed_group(session, users: list):
    """Create a demo group with one expense per split type"""
    alice, bob, carol, dave = users

    group = await GroupService.create_group(
        GroupCreate(name="Weekend trip", member_ids=[bob.id, carol.id, dave.id]), alice.id, session
    )
    print(f"  Created group '{group.name}' with {len(group.members)} members")

    await ExpenseService.create_expense(group.id, ExpenseCreate(
        title="Cabin rental",
        amount=Decimal("480.00"),
        shared_with=[alice.id, bob.id, carol.id, dave.id],
    ), alice.id, session)

    await ExpenseService.create_expense(group.id, ExpenseCreate(
        title="Groceries",
        amount=Decimal("120.00"),
        shared_with=[alice.id, bob.id, carol.id],
        split=SplitSpec(type="percent", allocations=[
            SplitAllocation(user=alice.id, value=50),
            SplitAllocation(user=bob.id, value=25),
            SplitAllocation(user=carol.id, value=25),
        ]),
    ), bob.id, session)

    await ExpenseService.create_expense(group.id, ExpenseCreate(
        title="Fuel",
        amount=Decimal("75.50"),
        paid_by=carol.id,
        shared_with=[carol.id, dave.id],
        split=SplitSpec(type="amount", allocations=[SplitAllocation(user=dave.id, value="30")]),
    ), carol.id, session)

    print("  Added 3 expenses (equal, percent and amount splits)")


async def main():
    """Main function to run seeding"""
    configure_logging("WARNING")
    print("Seeding database...\n")

    await create_tables()
    async with AsyncSessionLocal() as session:
        users = await seed_users(session)
        await seed_group(session, users)

    print(f"\nDone. All users have password: {PASSWORD}")


if __name__ == "__main__":
    asyncio.run(main())
