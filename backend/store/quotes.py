import json
import logging
import sqlite3

from matching.types import MatchResult
from .database import Database

logger = logging.getLogger(__name__)

JSON_FIELDS = ["machine_matches", "outsourced_steps", "capability_analysis"]

REVIEW_INSUFFICIENT_DATA = "insufficient_data"
REVIEW_AUTO_MATCHED = "auto_matched"
REVIEW_PENDING = "pending_review"


class QuoteNotFoundError(Exception):
    """Raised when a quote request id does not exist."""


class DuplicateQuoteError(Exception):
    """Raised when a quote number is already taken."""


def review_status_for(result: MatchResult, validation_failed: bool = False) -> str:
    if validation_failed:
        return REVIEW_INSUFFICIENT_DATA
    if result.feasibility == "full":
        return REVIEW_AUTO_MATCHED
    return REVIEW_PENDING


def _parse_json_fields(row: dict | None) -> dict | None:
    if row is None:
        return None
    for field in JSON_FIELDS:
        if field in row and row[field] and isinstance(row[field], str):
            try:
                row[field] = json.loads(row[field])
            except json.JSONDecodeError:
                pass
    return row


class QuoteStore:
    def __init__(self, db: Database):
        self.db = db

    async def _get_or_create(self, table: str, name: str, is_custom: bool = True) -> int:
        # Runs inside the caller's transaction.
        row = await self.db.fetchone(f"SELECT id FROM {table} WHERE name = ?", (name,))
        if row is not None:
            return row["id"]
        cursor = await self.db.execute(
            f"INSERT INTO {table} (name, is_custom) VALUES (?, ?)", (name, int(is_custom))
        )
        return cursor.lastrowid

    async def get_or_create_material(self, name: str, is_custom: bool = True) -> int:
        return await self._get_or_create("materials", name, is_custom)

    async def get_or_create_finish(self, name: str, is_custom: bool = True) -> int:
        return await self._get_or_create("finishes", name, is_custom)

    async def create_quote(self, data: dict) -> dict:
        """Insert a quote request plus its materials, finishes, certifications and file metadata.

        Everything lands in one transaction; a failure part way leaves no quote behind.
        """
        async with self.db.transaction():
            try:
                cursor = await self.db.execute(
                    """INSERT INTO quote_requests (
                           quote_number, company_name, contact_name, email, phone,
                           project_name, description, quantity, lead_time, part_notes, status
                       ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'pending')""",
                    (
                        data["quote_number"], data["company_name"], data["contact_name"],
                        data["email"], data.get("phone"), data["project_name"],
                        data.get("description"), data["quantity"], data.get("lead_time"),
                        data.get("part_notes"),
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateQuoteError(
                    f"Quote number '{data['quote_number']}' already exists"
                ) from e
            quote_id = cursor.lastrowid

            for name in data.get("materials") or []:
                material_id = await self.get_or_create_material(name)
                await self.db.execute(
                    "INSERT INTO quote_materials (quote_request_id, material_id) VALUES (?, ?)",
                    (quote_id, material_id),
                )
            for name in data.get("finishes") or []:
                finish_id = await self.get_or_create_finish(name)
                await self.db.execute(
                    "INSERT INTO quote_finishes (quote_request_id, finish_id) VALUES (?, ?)",
                    (quote_id, finish_id),
                )
            for code in data.get("certifications") or []:
                await self.db.execute(
                    """INSERT INTO quote_certifications (quote_request_id, certification_id)
                       SELECT ?, id FROM certifications WHERE code = ?""",
                    (quote_id, code),
                )
            for order, f in enumerate(data.get("files") or []):
                await self.db.execute(
                    """INSERT INTO quote_files
                       (quote_request_id, filename, file_extension, file_size_bytes, upload_order)
                       VALUES (?, ?, ?, ?, ?)""",
                    (quote_id, f["filename"], f.get("file_extension"), f.get("file_size_bytes"), order),
                )

        logger.info("Created quote request %s (id=%d)", data["quote_number"], quote_id)
        return await self.db.fetchone(
            "SELECT id, quote_number, created_at FROM quote_requests WHERE id = ?",
            (quote_id,),
        )

    async def list_quotes(
        self,
        status: str | None = None,
        company_name: str | None = None,
        from_date: str | None = None,
        to_date: str | None = None,
    ) -> list[dict]:
        """Quote requests newest first, with optional filters."""
        query = "SELECT * FROM quote_requests WHERE 1=1"
        params = []
        if status:
            query += " AND status = ?"
            params.append(status)
        if company_name:
            query += " AND company_name LIKE ? COLLATE NOCASE"
            params.append(f"%{company_name}%")
        if from_date:
            query += " AND created_at >= ?"
            params.append(from_date)
        if to_date:
            query += " AND created_at <= ?"
            params.append(to_date)
        query += " ORDER BY created_at DESC, id DESC"
        rows = await self.db.fetchall(query, tuple(params))
        return [_parse_json_fields(row) for row in rows]

    async def get_quote(self, quote_id: int) -> dict | None:
        row = await self.db.fetchone("SELECT * FROM quote_requests WHERE id = ?", (quote_id,))
        if row is None:
            return None
        row = _parse_json_fields(row)
        row["materials"] = await self.db.fetchcolumn(
            """SELECT m.name FROM quote_materials qm
               JOIN materials m ON qm.material_id = m.id
               WHERE qm.quote_request_id = ?""",
            (quote_id,),
        )
        row["finishes"] = await self.db.fetchcolumn(
            """SELECT f.name FROM quote_finishes qf
               JOIN finishes f ON qf.finish_id = f.id
               WHERE qf.quote_request_id = ?""",
            (quote_id,),
        )
        row["certifications"] = await self.db.fetchcolumn(
            """SELECT c.code FROM quote_certifications qc
               JOIN certifications c ON qc.certification_id = c.id
               WHERE qc.quote_request_id = ?""",
            (quote_id,),
        )
        return row

    async def save_analysis(self, quote_id: int, result: MatchResult, review_status: str) -> None:
        """Store the analysis blob against its quote request."""
        async with self.db.transaction():
            cursor = await self.db.execute(
                """UPDATE quote_requests SET
                       in_house_feasibility = ?,
                       machine_matches = ?,
                       outsourced_steps = ?,
                       capability_analysis = ?,
                       review_status = ?,
                       updated_at = CURRENT_TIMESTAMP
                   WHERE id = ?""",
                (
                    result.feasibility,
                    json.dumps([m.model_dump() for m in result.matches]),
                    json.dumps(result.outsourced_steps),
                    result.analysis.model_dump_json(exclude_none=True),
                    review_status,
                    quote_id,
                ),
            )
            if cursor.rowcount == 0:
                raise QuoteNotFoundError(f"Quote request {quote_id} not found")
        logger.info(
            "Saved analysis for quote %d: feasibility=%s review_status=%s",
            quote_id, result.feasibility, review_status,
        )
