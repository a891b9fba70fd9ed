"""Typed repository for run persistence."""

from __future__ import annotations

import json
from typing import Any, List, Optional

import aiosqlite

from src.models import Run, RunEvaluation

# Columns holding JSON-encoded output buckets.
_JSON_COLUMNS = (
    "output_candidate_projects",
    "output_big_picture",
    "output_work_performed",
    "output_iterations",
    "output_drafting_material",
)

_COLUMNS = tuple(Run.model_fields)


def _encode(run: Run) -> tuple[Any, ...]:
    data = run.model_dump(mode="json")
    values: list[Any] = []
    for column in _COLUMNS:
        value = data[column]
        if column in _JSON_COLUMNS and value is not None:
            value = json.dumps(value)
        elif column == "is_structured":
            value = 1 if value else 0
        values.append(value)
    return tuple(values)


def _row_to_run(row: aiosqlite.Row) -> Run:
    data = {column: row[column] for column in _COLUMNS}
    for column in _JSON_COLUMNS:
        raw = data[column]
        data[column] = json.loads(raw) if isinstance(raw, str) else raw
    data["is_structured"] = bool(data["is_structured"])
    return Run.model_validate(data)


class RunRepository:
    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def save_run(self, run: Run) -> str:
        placeholders = ", ".join("?" for _ in _COLUMNS)
        await self.db.execute(
            f"INSERT INTO runs ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
            _encode(run),
        )
        await self.db.commit()
        return run.id

    async def get_run(self, run_id: str) -> Optional[Run]:
        cursor = await self.db.execute("SELECT * FROM runs WHERE id = ?", (run_id,))
        row = await cursor.fetchone()
        return _row_to_run(row) if row else None

    async def list_runs(self, limit: Optional[int] = None, user_id: Optional[str] = None) -> List[Run]:
        """Runs newest first, optionally restricted to one user."""
        query = "SELECT * FROM runs"
        params: list[Any] = []
        if user_id is not None:
            query += " WHERE user_id = ?"
            params.append(user_id)
        query += " ORDER BY created_at DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        cursor = await self.db.execute(query, tuple(params))
        rows = await cursor.fetchall()
        return [_row_to_run(row) for row in rows]

    async def count_runs(self) -> int:
        cursor = await self.db.execute("SELECT COUNT(*) FROM runs")
        row = await cursor.fetchone()
        return int(row[0]) if row else 0

    async def update_evaluation(self, run_id: str, evaluation: RunEvaluation) -> Optional[Run]:
        """Apply the set evaluation fields; returns the updated run or None if missing."""
        updates = evaluation.model_dump(exclude_none=True)
        if updates:
            assignments = ", ".join(f"{column} = ?" for column in updates)
            cursor = await self.db.execute(
                f"UPDATE runs SET {assignments} WHERE id = ?",
                (*updates.values(), run_id),
            )
            await self.db.commit()
            if cursor.rowcount == 0:
                return None
        return await self.get_run(run_id)
