"""Seeds a local database with an admin, a few vehicles and dropdown options.

Run with ``python -m carlot.scripts.seed_data`` once BACKEND_URL is set.
"""

import asyncio
import logging
import os

from carlot.auth.passwords_handler import hash_password_async
from carlot.core.db import create_tables, dispose_engine, get_sessionmaker
from carlot.core.logging import setup_logging
from carlot.store.backend import BackendStore

logger = logging.getLogger(__name__)

DROPDOWNS = {
    "pickup_location": ["Manheim Atlanta", "ADESA Dallas", "Copart Houston"],
    "exterior_color": ["Black", "White", "Silver", "Red", "Blue"],
    "task_category": ["Pickup", "Title", "Inspection", "Detailing"],
}

VEHICLES = [
    {"make": "Toyota", "model": "Camry", "year": 2019, "vin": "4T1B11HK5KU123456",
     "purchase_date": "2024-03-01", "pickup_location": "Manheim Atlanta", "odometer": 42000, "bought_price": 15500},
    {"make": "Honda", "model": "Civic", "year": 2020, "vin": "",
     "purchase_date": "2024-03-04", "pickup_location": "ADESA Dallas", "status": "in_progress"},
    {"make": "Ford", "model": "F-150", "year": 2018, "vin": "1FTEW1EP5JFA12345",
     "purchase_date": "2024-02-20", "pickup_location": "Copart Houston", "status": "sold", "title_status": "present"},
]


async def seed():
    await create_tables()
    async with get_sessionmaker()() as db:
        store = BackendStore(db)
        admin = await store.insert("profiles", {
            "email": os.getenv("SEED_ADMIN_EMAIL", "admin@example.com"),
            "username": "admin",
            "role": "admin",
            "password": await hash_password_async(os.getenv("SEED_ADMIN_PASSWORD", "change-me-now")),
        })

        for category, labels in DROPDOWNS.items():
            for label in labels:
                await store.insert("dropdown_settings", {"category": category, "label": label, "value": label})

        for vehicle in VEHICLES:
            await store.insert("vehicles", {**vehicle, "created_by": admin["id"]})

    logger.info("Seed data inserted", extra={"vehicles": len(VEHICLES), "admin_id": admin["id"]})
    await dispose_engine()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
