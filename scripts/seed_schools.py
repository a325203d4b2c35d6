#!/usr/bin/env python3
"""Create the school table and insert a few demo schools."""

import sys
import os
sys.path.append(os.getcwd())
import asyncio

from app.database import dispose_engine, init_models, session_scope
from app.services import SchoolCatalog, ValidationError

DEMO_SCHOOLS = [
    ("Lincoln High", "1 Main St, Philadelphia, PA", 39.9526, -75.1652),
    ("Stuyvesant High School", "345 Chambers St, New York, NY", 40.7178, -74.0138),
    ("Lowell High School", "1101 Eucalyptus Dr, San Francisco, CA", 37.7305, -122.4835),
    ("Eton College", "Eton, Windsor SL4 6DW, UK", 51.4925, -0.6089),
    ("Null Island Academy", "Gulf of Guinea", 0.0, 0.0),
]


async def seed_schools() -> None:
    await init_models()
    async with session_scope() as session:
        catalog = SchoolCatalog(session)
        existing = {school.name for school in await catalog.list_all()}
        for name, address, latitude, longitude in DEMO_SCHOOLS:
            if name in existing:
                print(f"Skipping {name}: already present")
                continue
            try:
                school_id = await catalog.create(name, address, latitude, longitude)
            except ValidationError as exc:
                print(f"Skipping {name}: {exc.errors}")
                continue
            print(f"Added {name} ({school_id})")
    await dispose_engine()


if __name__ == "__main__":
    asyncio.run(seed_schools())
