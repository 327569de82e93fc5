#!/usr/bin/env python3
"""
Seed script: creates the sample non-conformance records used for demos.
Run after migrations: python scripts/seed.py
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import func, select

from nctrack.config import settings
from nctrack.database import Database
from nctrack.models import NonConformance
from nctrack.schemas.nonconformance import NCCreate
from nctrack.storage.repositories import add_comment, create_nc


SAMPLE_NCS = [
    {
        "title": "Product dimension out of tolerance",
        "description": "Measurement of part #A123 shows 10.5mm diameter instead of specified 10.0mm ±0.2mm tolerance.",
        "date_reported": "2024-02-01",
        "status": "Closed",
        "severity": "Medium",
        "category": "Product",
        "department": "Machining",
        "nc_source": "Internal Audit",
        "root_cause": "Machining tool wear exceeded service limit",
        "root_cause_category": "Equipment",
        "corrective_actions": "Replaced machining tool, implemented preventive maintenance schedule",
        "responsible_person": "John Smith",
        "due_date": "2024-02-15",
        "closure_date": "2024-02-14",
        "notes": "All affected parts were reworked successfully",
    },
    {
        "title": "Missing quality inspection stamp",
        "description": "Batch #2024-045 shipped without final quality inspection stamp on documentation.",
        "date_reported": "2024-02-03",
        "status": "Under Investigation",
        "severity": "High",
        "category": "Process",
        "department": "Quality",
        "nc_source": "Customer Complaint",
        "root_cause": "Inspector was absent and backup process not followed",
        "root_cause_category": "People",
        "corrective_actions": "Implementing mandatory checklist system with electronic verification",
        "responsible_person": "Sarah Johnson",
        "due_date": "2024-02-20",
        "notes": "Customer notified, products verified retrospectively",
    },
    {
        "title": "Incorrect material used in assembly",
        "description": "Assembly line used steel bolts instead of stainless steel as specified in BOM.",
        "date_reported": "2024-02-05",
        "status": "Action Required",
        "severity": "Critical",
        "category": "Product",
        "department": "Assembly",
        "nc_source": "In-Process Inspection",
        "root_cause": "Similar-looking parts stored in adjacent bins without clear labeling",
        "root_cause_category": "Material",
        "corrective_actions": "Segregated storage, color-coded bins, added barcode scanning requirement",
        "responsible_person": "Mike Chen",
        "due_date": "2024-02-12",
        "notes": "Recall of 50 units in progress",
    },
    {
        "title": "Documentation procedure outdated",
        "description": "Procedure DOC-123 references obsolete software version, causing confusion.",
        "date_reported": "2024-02-06",
        "status": "Open",
        "severity": "Low",
        "category": "Documentation",
        "department": "Quality",
        "nc_source": "Internal Audit",
        "standard_reference": "ISO 9001:2015",
        "clause_reference": "7.5.2",
        "responsible_person": "Emily Davis",
        "due_date": "2024-02-25",
        "notes": "Need to review all related procedures for consistency",
    },
    {
        "title": "Temperature excursion in storage area",
        "description": "Climate-controlled storage area temperature exceeded 25°C limit for 3 hours.",
        "date_reported": "2024-02-07",
        "status": "Under Investigation",
        "severity": "High",
        "category": "Process",
        "department": "Warehouse",
        "nc_source": "Monitoring Alarm",
        "root_cause": "HVAC system malfunction",
        "root_cause_category": "Equipment",
        "responsible_person": "David Wilson",
        "due_date": "2024-02-10",
        "notes": "Affected inventory being evaluated for impact",
    },
]


async def seed():
    database = Database(settings.database_url)
    await database.create_all()

    async with database.session_maker() as session:
        existing = (
            await session.execute(select(func.count()).select_from(NonConformance))
        ).scalar_one()
        if existing:
            print(f"Database already holds {existing} records, skipping seed.")
            await database.dispose()
            return

        for sample in SAMPLE_NCS:
            nc = await create_nc(session, NCCreate(**sample).model_dump())
            print(f"Created NC #{nc.id}: {nc.title}")
            if nc.status == "Closed":
                await add_comment(
                    session,
                    nc.id,
                    author_name=nc.responsible_person or "Quality",
                    comment_text="Tool replaced and first-article inspection passed.",
                    comment_tag="Verification",
                )

    await database.dispose()
    print("Database seeding completed!")


if __name__ == "__main__":
    asyncio.run(seed())
