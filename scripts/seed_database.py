"""Seed the SQLite quote intake database from JSON seed files.

Reads data/seed/*.json and creates data/quote_intake.db with:
- equipment (+ operations, materials, preferences, fixtures)
- materials (one row per distinct equipment material)
- certifications
- empty quote request tables

Idempotent: drops and recreates all tables on each run.
"""

import argparse
import json
import sqlite3
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
SEED_DIR = BASE_DIR / "data" / "seed"
DB_PATH = BASE_DIR / "data" / "quote_intake.db"

# Add backend to sys.path so we can import the shared schema
sys.path.insert(0, str(BASE_DIR / "backend"))

from store.schema import SCHEMA_SQL  # noqa: E402

TABLES = [
    "quote_files",
    "quote_certifications",
    "quote_finishes",
    "quote_materials",
    "quote_requests",
    "equipment_fixtures",
    "equipment_preferences",
    "equipment_materials",
    "equipment_operations",
    "equipment",
    "certifications",
    "finishes",
    "materials",
]


def load_json(filename: str) -> dict:
    path = SEED_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Required file not found: {path}")
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def create_tables(conn: sqlite3.Connection) -> None:
    conn.executescript("".join(f"DROP TABLE IF EXISTS {t};\n" for t in TABLES))
    conn.executescript(SCHEMA_SQL)


def material_id(conn: sqlite3.Connection, name: str) -> int:
    row = conn.execute("SELECT id FROM materials WHERE name = ?", (name,)).fetchone()
    if row:
        return row[0]
    return conn.execute(
        "INSERT INTO materials (name, is_custom) VALUES (?, 0)", (name,)
    ).lastrowid


def seed_equipment(conn: sqlite3.Connection, data: dict) -> int:
    for machine in data["equipment"]:
        equipment_id = conn.execute(
            """INSERT INTO equipment
               (machine_id, name, type, location, status, controller, work_envelope_mm,
                max_part_weight_kg, min_tolerance_mm, setup_time_min,
                estimated_hourly_rate_usd, notes)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                machine["machine_id"],
                machine["name"],
                machine["type"],
                machine.get("location"),
                machine.get("status", "available"),
                machine.get("controller"),
                json.dumps(machine["work_envelope_mm"]) if machine.get("work_envelope_mm") else None,
                machine.get("max_part_weight_kg"),
                machine.get("min_tolerance_mm"),
                machine.get("setup_time_min"),
                machine.get("estimated_hourly_rate_usd"),
                machine.get("notes"),
            ),
        ).lastrowid

        conn.executemany(
            "INSERT INTO equipment_operations (equipment_id, operation) VALUES (?, ?)",
            [(equipment_id, op) for op in machine.get("operations", [])],
        )
        conn.executemany(
            "INSERT INTO equipment_materials (equipment_id, material_id) VALUES (?, ?)",
            [(equipment_id, material_id(conn, m)) for m in machine.get("materials", [])],
        )
        conn.executemany(
            "INSERT INTO equipment_preferences (equipment_id, preference) VALUES (?, ?)",
            [(equipment_id, p) for p in machine.get("preferred_for", [])],
        )
        conn.executemany(
            "INSERT INTO equipment_fixtures (equipment_id, fixture_type) VALUES (?, ?)",
            [(equipment_id, f) for f in machine.get("fixture_types", [])],
        )
    return len(data["equipment"])


def seed_certifications(conn: sqlite3.Connection, data: dict) -> int:
    rows = [(c["code"], c["name"]) for c in data["certifications"]]
    conn.executemany("INSERT INTO certifications (code, name) VALUES (?, ?)", rows)
    return len(rows)


def verify(conn: sqlite3.Connection) -> None:
    for table in ("equipment", "materials", "certifications", "equipment_operations"):
        count = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        print(f"  {table}: {count} rows")

    available = conn.execute(
        "SELECT COUNT(*) FROM equipment WHERE status = 'available'"
    ).fetchone()[0]
    if available == 0:
        raise RuntimeError("No available equipment seeded; matching would always be 'none'")
    print(f"  available equipment: {available}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the quote intake database")
    parser.add_argument("--db", default=str(DB_PATH), help="SQLite file to (re)create")
    args = parser.parse_args()

    # Load first so a missing or broken seed file leaves the existing database alone
    equipment = load_json("equipment.json")
    certifications = load_json("certifications.json")

    print(f"Seeding database: {args.db}")
    Path(args.db).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(args.db)
    try:
        create_tables(conn)
        n_equipment = seed_equipment(conn, equipment)
        n_certs = seed_certifications(conn, certifications)
        conn.commit()

        print(f"Seeded: {n_equipment} machines, {n_certs} certifications")
        print("Verification:")
        verify(conn)
        print("Database seeded successfully.")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
