#!/usr/bin/env python3
"""
Seed the database with the default Alice/Bob/Charlie graph.
"""

import asyncio
import os
import sys

# Add parent directory to path
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from app.config import settings
from app.database import AsyncSessionLocal, engine, init_db
from app.services.graph_store import GraphStore
from app.services.seed import seed_default_graph


async def seed_data():
    """Create tables and seed an empty graph."""
    print("🌱 Starting database seeding...")
    print(f"📦 Database: {settings.database_url}")

    await init_db()

    async with AsyncSessionLocal() as session:
        try:
            store = GraphStore(session)
            if await seed_default_graph(store):
                users = await store.list_users()
                for user in users:
                    print(
                        f"✅ {user.username} ({user.id}) - "
                        f"friends: {len(user.friends)}, score: {user.popularity_score}"
                    )
            else:
                print("ℹ️  Graph already has users - nothing to seed")

            print("✨ Seeding completed successfully!")

        except Exception as e:
            print(f"❌ Error during seeding: {e}")
            await session.rollback()
            raise

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_data())
