import json

import aiosqlite
import pytest

from store.database import Database
from store.schema import SCHEMA_SQL


MACHINES = [
    {
        "machine_id": "HAAS_VF2_001",
        "name": "Haas VF-2",
        "type": "vertical_mill",
        "status": "available",
        "work_envelope_mm": {"x": 762, "y": 406, "z": 508},
        "min_tolerance_mm": 0.01,
        "setup_time_min": 45,
        "estimated_hourly_rate_usd": 95.0,
        "operations": ["milling", "drilling"],
        "materials": ["Aluminum", "Steel"],
        "preferred_for": ["prototype"],
        "fixture_types": ["vise"],
    },
    {
        "machine_id": "OKUMA_LB3000_001",
        "name": "Okuma LB3000",
        "type": "lathe",
        "status": "available",
        "work_envelope_mm": {"x": 320, "y": 320, "z": 500},
        "min_tolerance_mm": 0.008,
        "setup_time_min": 60,
        "estimated_hourly_rate_usd": 110.0,
        "operations": ["turning", "threading"],
        "materials": ["Steel", "Brass"],
        "preferred_for": ["high_volume"],
        "fixture_types": [],
    },
    {
        "machine_id": "HAAS_ST10_001",
        "name": "Haas ST-10",
        "type": "lathe",
        "status": "maintenance",
        "work_envelope_mm": None,
        "min_tolerance_mm": None,
        "setup_time_min": 40,
        "estimated_hourly_rate_usd": 85.0,
        "operations": ["turning"],
        "materials": ["Aluminum"],
        "preferred_for": [],
        "fixture_types": [],
    },
]


async def _seed(conn: aiosqlite.Connection) -> None:
    await conn.executescript(SCHEMA_SQL)
    await conn.executemany(
        "INSERT INTO certifications (code, name) VALUES (?, ?)",
        [("AS9100", "AS9100 Aerospace Quality"), ("ITAR", "ITAR Registered")],
    )
    for m in MACHINES:
        cursor = await conn.execute(
            """INSERT INTO equipment
               (machine_id, name, type, status, work_envelope_mm, min_tolerance_mm,
                setup_time_min, estimated_hourly_rate_usd)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                m["machine_id"], m["name"], m["type"], m["status"],
                json.dumps(m["work_envelope_mm"]) if m["work_envelope_mm"] else None,
                m["min_tolerance_mm"], m["setup_time_min"], m["estimated_hourly_rate_usd"],
            ),
        )
        equipment_id = cursor.lastrowid
        for op in m["operations"]:
            await conn.execute(
                "INSERT INTO equipment_operations VALUES (?, ?)", (equipment_id, op)
            )
        for name in m["materials"]:
            await conn.execute(
                "INSERT OR IGNORE INTO materials (name, is_custom) VALUES (?, 0)", (name,)
            )
            await conn.execute(
                """INSERT INTO equipment_materials (equipment_id, material_id)
                   SELECT ?, id FROM materials WHERE name = ?""",
                (equipment_id, name),
            )
        for pref in m["preferred_for"]:
            await conn.execute(
                "INSERT INTO equipment_preferences VALUES (?, ?)", (equipment_id, pref)
            )
        for fixture in m["fixture_types"]:
            await conn.execute(
                "INSERT INTO equipment_fixtures VALUES (?, ?)", (equipment_id, fixture)
            )
    await conn.commit()


@pytest.fixture
async def test_db(tmp_path):
    """A seeded quote intake database."""
    db_path = tmp_path / "test_quote_intake.db"
    async with aiosqlite.connect(str(db_path)) as conn:
        await _seed(conn)
    db = await Database.connect(str(db_path))
    yield db
    await db.close()
