"""Relational schema for equipment capabilities and quote requests.

Shared by ``scripts/seed_database.py`` and the test fixtures so both build
exactly the same tables.
"""

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS materials (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    is_custom INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS finishes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    is_custom INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS certifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS equipment (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    location TEXT,
    status TEXT NOT NULL DEFAULT 'available',
    controller TEXT,
    work_envelope_mm TEXT,
    max_part_weight_kg REAL,
    min_tolerance_mm REAL,
    setup_time_min INTEGER,
    estimated_hourly_rate_usd REAL,
    notes TEXT
);

CREATE TABLE IF NOT EXISTS equipment_operations (
    equipment_id INTEGER NOT NULL REFERENCES equipment(id) ON DELETE CASCADE,
    operation TEXT NOT NULL,
    PRIMARY KEY (equipment_id, operation)
);

CREATE TABLE IF NOT EXISTS equipment_materials (
    equipment_id INTEGER NOT NULL REFERENCES equipment(id) ON DELETE CASCADE,
    material_id INTEGER NOT NULL REFERENCES materials(id),
    PRIMARY KEY (equipment_id, material_id)
);

CREATE TABLE IF NOT EXISTS equipment_preferences (
    equipment_id INTEGER NOT NULL REFERENCES equipment(id) ON DELETE CASCADE,
    preference TEXT NOT NULL,
    PRIMARY KEY (equipment_id, preference)
);

CREATE TABLE IF NOT EXISTS equipment_fixtures (
    equipment_id INTEGER NOT NULL REFERENCES equipment(id) ON DELETE CASCADE,
    fixture_type TEXT NOT NULL,
    PRIMARY KEY (equipment_id, fixture_type)
);

CREATE TABLE IF NOT EXISTS quote_requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    quote_number TEXT NOT NULL UNIQUE,
    company_name TEXT NOT NULL,
    contact_name TEXT NOT NULL,
    email TEXT NOT NULL,
    phone TEXT,
    project_name TEXT NOT NULL,
    description TEXT,
    quantity INTEGER NOT NULL,
    lead_time TEXT,
    part_notes TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    review_status TEXT,
    in_house_feasibility TEXT,
    machine_matches TEXT,
    outsourced_steps TEXT,
    capability_analysis TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS quote_materials (
    quote_request_id INTEGER NOT NULL REFERENCES quote_requests(id) ON DELETE CASCADE,
    material_id INTEGER NOT NULL REFERENCES materials(id)
);

CREATE TABLE IF NOT EXISTS quote_finishes (
    quote_request_id INTEGER NOT NULL REFERENCES quote_requests(id) ON DELETE CASCADE,
    finish_id INTEGER NOT NULL REFERENCES finishes(id)
);

CREATE TABLE IF NOT EXISTS quote_certifications (
    quote_request_id INTEGER NOT NULL REFERENCES quote_requests(id) ON DELETE CASCADE,
    certification_id INTEGER NOT NULL REFERENCES certifications(id)
);

CREATE TABLE IF NOT EXISTS quote_files (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    quote_request_id INTEGER NOT NULL REFERENCES quote_requests(id) ON DELETE CASCADE,
    filename TEXT NOT NULL,
    file_extension TEXT,
    file_size_bytes INTEGER,
    upload_order INTEGER NOT NULL DEFAULT 0
);
"""
