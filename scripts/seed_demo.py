#!/usr/bin/env python3
"""
Seed script to create a demo restaurant with menu prices and operators
"""

import asyncio
import uuid

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from restodesk.config import settings
    from restodesk.database import SessionLocal, engine, Base
    from restodesk.models.tenant import Tenant, Profile
    from restodesk.models.menu import MenuPrice
    from restodesk.models.user import User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo tenant already exists
        result = await db.execute(
            select(Tenant).where(Tenant.contact_email == "contact@chez-mario.fr")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo tenant...")

        tenant = Tenant(
            id=uuid.uuid4(),
            name="Chez Mario",
            contact_email="contact@chez-mario.fr",
            timezone="Europe/Paris",
        )
        db.add(tenant)
        await db.flush()

        print(f"Created tenant: {tenant.name} (ID: {tenant.id})")

        profile = Profile(
            tenant_id=tenant.id,
            display_name="Chez Mario",
            minutes_balance=100,
            auto_recharge_threshold=settings.default_auto_recharge_threshold,
            preferred_pack_type="M",
        )
        db.add(profile)

        # Create super admin user
        admin_user = User(
            id=uuid.uuid4(),
            email="admin@restodesk.app",
            hashed_password=pwd_context.hash("admin123"),
            full_name="System Admin",
            role=UserRole.SUPER_ADMIN,
            is_active=True,
        )
        db.add(admin_user)

        # Create restaurant admin user
        restaurant_admin = User(
            id=uuid.uuid4(),
            tenant_id=tenant.id,
            email="mario@chez-mario.fr",
            hashed_password=pwd_context.hash("mario123"),
            full_name="Mario Rossi",
            role=UserRole.RESTAURANT_ADMIN,
            is_active=True,
        )
        db.add(restaurant_admin)

        # Kitchen screen account, read-only
        viewer = User(
            id=uuid.uuid4(),
            tenant_id=tenant.id,
            email="cuisine@chez-mario.fr",
            hashed_password=pwd_context.hash("cuisine123"),
            full_name="Kitchen Screen",
            role=UserRole.STAFF_VIEWER,
            is_active=True,
        )
        db.add(viewer)

        print("Creating menu prices...")

        # Names must match what the voice agent sends in Choix_menu
        menu_prices = [
            {"item_name": "Bruschetta", "price_cents": 790, "category": "Entrées"},
            {"item_name": "Burrata", "price_cents": 1150, "category": "Entrées"},
            {"item_name": "Pizza Margherita", "price_cents": 1200, "category": "Pizzas"},
            {"item_name": "Pizza Regina", "price_cents": 1400, "category": "Pizzas"},
            {"item_name": "Pizza 4 Fromages", "price_cents": 1500, "category": "Pizzas"},
            {"item_name": "Lasagnes", "price_cents": 1600, "category": "Plats"},
            {"item_name": "Spaghetti Carbonara", "price_cents": 1450, "category": "Plats"},
            {"item_name": "Tiramisu", "price_cents": 750, "category": "Desserts"},
            {"item_name": "Panna Cotta", "price_cents": 650, "category": "Desserts"},
            {"item_name": "Coca-Cola", "price_cents": 350, "category": "Boissons"},
            {"item_name": "Eau Pétillante", "price_cents": 300, "category": "Boissons"},
        ]

        for price_data in menu_prices:
            db.add(MenuPrice(tenant_id=tenant.id, **price_data))

        await db.commit()

        print(f"""
Demo data created successfully!

Tenant: {tenant.name}
  ID: {tenant.id}
  Minutes: {profile.minutes_balance}

Users:
  Super Admin:
    Email: admin@restodesk.app
    Password: admin123

  Restaurant Admin:
    Email: mario@chez-mario.fr
    Password: mario123

  Staff Viewer:
    Email: cuisine@chez-mario.fr
    Password: cuisine123

Menu: {len(menu_prices)} prices created

Point the automation platform at POST /webhooks/automation with
restaurant_id={tenant.id}.
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
