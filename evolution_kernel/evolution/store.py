"""
Evolution Store — persisted record of every proposed parameter change.

Behavioral Contract:
- One row per evolution. Rows are updated in place, never deleted.
- Indexed by category, status and creation/apply time; the full record is
  kept as JSON next to the indexed columns.
- At most one active evolution per category, backed by a partial unique
  index.
- transaction() runs a read-then-write sequence atomically so concurrent
  approvals cannot both activate an evolution of the same category.
"""

import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from evolution_kernel.models.evolution import Evolution, EvolutionStatus
from evolution_kernel.models.parameters import EvolutionCategory


class EvolutionStore:
    """
    SQLite evolution repository.
    A single connection is shared across threads and guarded by a lock.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(
            db_path, check_same_thread=False, isolation_level=None
        )
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._depth = 0
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the evolutions table if it doesn't exist."""
        with self._lock:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS evolutions (
                    id TEXT PRIMARY KEY,
                    category TEXT NOT NULL,
                    status TEXT NOT NULL,
                    proposed_by TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    applied_at TEXT,
                    record_json TEXT NOT NULL
                )
            """)
            self._conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_evolutions_category
                ON evolutions(category, status)
            """)
            self._conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_evolutions_status
                ON evolutions(status)
            """)
            self._conn.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_evolutions_one_active
                ON evolutions(category) WHERE status = 'active'
            """)

    @contextmanager
    def transaction(self) -> Iterator["EvolutionStore"]:
        """
        Atomic unit of work. Nested calls join the outer transaction.
        Any exception rolls back every write made inside the block.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self._conn.execute("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield self
            except BaseException:
                self._conn.execute("ROLLBACK")
                raise
            else:
                self._conn.execute("COMMIT")
            finally:
                self._depth = 0

    def _deserialize(self, row: sqlite3.Row) -> Evolution:
        return Evolution.model_validate_json(row["record_json"])

    def _columns(self, evolution: Evolution) -> tuple:
        return (
            evolution.category.value,
            evolution.status.value,
            evolution.proposed_by,
            evolution.created_at.isoformat(),
            evolution.applied_at.isoformat() if evolution.applied_at else None,
            evolution.model_dump_json(),
        )

    def insert(self, evolution: Evolution) -> Evolution:
        """Persist a new evolution."""
        with self.transaction():
            self._conn.execute(
                """
                INSERT INTO evolutions (
                    id, category, status, proposed_by, created_at,
                    applied_at, record_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (evolution.id,) + self._columns(evolution),
            )
        return evolution

    def update(self, evolution: Evolution) -> Evolution:
        """Overwrite an existing evolution with its new state."""
        with self.transaction():
            cursor = self._conn.execute(
                """
                UPDATE evolutions SET
                    category = ?, status = ?, proposed_by = ?, created_at = ?,
                    applied_at = ?, record_json = ?
                WHERE id = ?
                """,
                self._columns(evolution) + (evolution.id,),
            )
            if cursor.rowcount == 0:
                raise KeyError(evolution.id)
        return evolution

    def get(self, evolution_id: str) -> Optional[Evolution]:
        """Get a specific evolution by ID."""
        with self._lock:
            row = self._conn.execute(
                "SELECT record_json FROM evolutions WHERE id = ?", (evolution_id,)
            ).fetchone()
        return self._deserialize(row) if row else None

    def list_by_category(
        self,
        category: EvolutionCategory,
        status: Optional[EvolutionStatus] = None,
    ) -> List[Evolution]:
        """All evolutions of a category, optionally restricted to one status."""
        category = EvolutionCategory(category)
        with self._lock:
            if status is not None:
                rows = self._conn.execute(
                    "SELECT record_json FROM evolutions "
                    "WHERE category = ? AND status = ? ORDER BY rowid",
                    (category.value, EvolutionStatus(status).value),
                ).fetchall()
            else:
                rows = self._conn.execute(
                    "SELECT record_json FROM evolutions WHERE category = ? ORDER BY rowid",
                    (category.value,),
                ).fetchall()
        return [self._deserialize(r) for r in rows]

    def list_by_status(
        self,
        status: EvolutionStatus,
        category: Optional[EvolutionCategory] = None,
    ) -> List[Evolution]:
        """All evolutions in a status, newest applied first."""
        if category is not None:
            return sorted(
                self.list_by_category(category, status=status),
                key=lambda e: (e.applied_at is not None, e.applied_at, e.id),
                reverse=True,
            )
        with self._lock:
            rows = self._conn.execute(
                "SELECT record_json FROM evolutions WHERE status = ? "
                "ORDER BY applied_at IS NULL, applied_at DESC, id DESC",
                (EvolutionStatus(status).value,),
            ).fetchall()
        return [self._deserialize(r) for r in rows]

    def list_all(
        self,
        status: Optional[EvolutionStatus] = None,
        category: Optional[EvolutionCategory] = None,
        limit: int = 50,
    ) -> List[Evolution]:
        """Filtered evolutions, newest created first."""
        clauses = []
        params: list = []
        if status is not None:
            clauses.append("status = ?")
            params.append(EvolutionStatus(status).value)
        if category is not None:
            clauses.append("category = ?")
            params.append(EvolutionCategory(category).value)
        where = f"WHERE {' AND '.join(clauses)} " if clauses else ""
        params.append(limit)
        with self._lock:
            rows = self._conn.execute(
                f"SELECT record_json FROM evolutions {where}"
                "ORDER BY created_at DESC, rowid DESC LIMIT ?",
                tuple(params),
            ).fetchall()
        return [self._deserialize(r) for r in rows]

    def count(self) -> int:
        """Total number of evolutions."""
        with self._lock:
            row = self._conn.execute("SELECT COUNT(*) as cnt FROM evolutions").fetchone()
        return row["cnt"]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
