import json

from matching.types import EquipmentRecord
from .database import Database


JSON_FIELDS = ["work_envelope_mm"]


def _parse_json_fields(row: dict | None) -> dict | None:
    """Parse JSON string fields in an equipment row."""
    if row is None:
        return None
    for field in JSON_FIELDS:
        if field in row and row[field] and isinstance(row[field], str):
            try:
                row[field] = json.loads(row[field])
            except json.JSONDecodeError:
                row[field] = None
    return row


class EquipmentRepository:
    def __init__(self, db: Database):
        self.db = db

    async def _enrich(self, row: dict) -> dict:
        """Attach operations, materials, preferences and fixtures to an equipment row."""
        equipment_id = row["id"]
        row = _parse_json_fields(row)
        row["operations"] = await self.db.fetchcolumn(
            "SELECT operation FROM equipment_operations WHERE equipment_id = ? ORDER BY operation",
            (equipment_id,),
        )
        row["materials"] = await self.db.fetchcolumn(
            """SELECT m.name FROM equipment_materials em
               JOIN materials m ON em.material_id = m.id
               WHERE em.equipment_id = ? ORDER BY m.name""",
            (equipment_id,),
        )
        row["preferred_for"] = await self.db.fetchcolumn(
            "SELECT preference FROM equipment_preferences WHERE equipment_id = ? ORDER BY preference",
            (equipment_id,),
        )
        row["fixture_types"] = await self.db.fetchcolumn(
            "SELECT fixture_type FROM equipment_fixtures WHERE equipment_id = ? ORDER BY fixture_type",
            (equipment_id,),
        )
        return row

    async def get_by_id(self, equipment_id: int) -> dict | None:
        row = await self.db.fetchone("SELECT * FROM equipment WHERE id = ?", (equipment_id,))
        if row is None:
            return None
        return await self._enrich(row)

    async def get_by_machine_id(self, machine_id: str) -> dict | None:
        row = await self.db.fetchone(
            "SELECT * FROM equipment WHERE machine_id = ?", (machine_id,)
        )
        if row is None:
            return None
        return await self._enrich(row)

    async def list_equipment(
        self, status: str | None = None, type: str | None = None
    ) -> list[dict]:
        """All equipment ordered by name, optionally filtered by status and type."""
        query = "SELECT * FROM equipment WHERE 1=1"
        params = []
        if status:
            query += " AND status = ?"
            params.append(status)
        if type:
            query += " AND type = ?"
            params.append(type)
        query += " ORDER BY name"
        rows = await self.db.fetchall(query, tuple(params))
        return [await self._enrich(row) for row in rows]

    async def fetch_available(self) -> list[EquipmentRecord]:
        """Snapshots of every available machine, ready for matching."""
        rows = await self.list_equipment(status="available")
        return [EquipmentRecord.model_validate(row) for row in rows]
