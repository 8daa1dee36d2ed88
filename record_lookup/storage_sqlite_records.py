import logging
import sqlite3
from dataclasses import dataclass
from typing import Iterable

from record_lookup.lookup_model import Candidate, ProviderError, SearchQuery

logger = logging.getLogger("storage_sqlite_records")

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS lookup_records (
    record_id TEXT PRIMARY KEY,
    object_name TEXT NOT NULL,
    name TEXT NOT NULL,
    secondary TEXT NOT NULL DEFAULT '',
    parent_id TEXT NOT NULL DEFAULT '',
    is_closed INTEGER NOT NULL DEFAULT 0
);
"""

INSERT_SQL = """
INSERT OR REPLACE INTO lookup_records (record_id, object_name, name, secondary, parent_id, is_closed)
VALUES (?, ?, ?, ?, ?, ?);
"""


@dataclass(frozen=True)
class RecordRow:
    record_id: str
    object_name: str
    name: str
    secondary: str = ""
    parent_id: str = ""
    is_closed: bool = False


DEMO_RECORDS: tuple[RecordRow, ...] = (
    RecordRow("001A", "account", "Acme Corp", "Manufacturing"),
    RecordRow("001B", "account", "Acme Logistics", "Transportation"),
    RecordRow("001C", "account", "Globex", "Energy"),
    RecordRow("001D", "account", "Initech", "Technology"),
    RecordRow("001E", "account", "Umbrella Health", "Healthcare"),
    RecordRow("003A", "contact", "Ada Lovelace", "CTO", parent_id="001D"),
    RecordRow("003B", "contact", "Grace Hopper", "Engineer", parent_id="001A"),
    RecordRow("006A", "opportunity", "Acme Renewal", "Negotiation", parent_id="001A"),
    RecordRow("006B", "opportunity", "Acme Expansion", "Closed Won", parent_id="001A", is_closed=True),
    RecordRow("006C", "opportunity", "Globex Pilot", "Prospecting", parent_id="001C"),
)


def init_db(db_path: str) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(CREATE_TABLE_SQL)
        conn.commit()
    logger.info("Initialized SQLite DB at %s", db_path)


def insert_records(db_path: str, rows: Iterable[RecordRow]) -> int:
    rows_list = list(rows)
    with sqlite3.connect(db_path) as conn:
        conn.executemany(
            INSERT_SQL,
            [
                (r.record_id, r.object_name.lower(), r.name, r.secondary, r.parent_id, int(r.is_closed))
                for r in rows_list
            ],
        )
        conn.commit()

    logger.info("Inserted %d lookup records into %s", len(rows_list), db_path)
    return len(rows_list)


def seed_demo_records(db_path: str) -> int:
    init_db(db_path)
    return insert_records(db_path, DEMO_RECORDS)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteRecordProvider:
    """
    Demo record provider backed by the `lookup_records` table.

    Honors the lookup context: object name, parent filter, the include-closed
    flag for opportunities, and `load_selected` requests that resolve one id.
    """

    def __init__(self, db_path: str, *, max_results: int = 10) -> None:
        self.db_path = db_path
        self.max_results = max(1, int(max_results))

    def __call__(self, query: SearchQuery) -> list[Candidate]:
        params = query.as_params()
        object_name = str(params.get("object_api_name") or "").lower()

        clauses = ["object_name = ?"]
        args: list[object] = [object_name]
        if params.get("load_selected"):
            clauses.append("record_id = ?")
            args.append(str(params.get("selected_record_id") or ""))
        else:
            clauses.append("name LIKE ? ESCAPE '\\'")
            args.append(f"%{_escape_like(str(params.get('search_string') or ''))}%")
            parent_id = str(params.get("parent_record_id") or "")
            if parent_id:
                clauses.append("parent_id = ?")
                args.append(parent_id)
            if object_name == "opportunity" and not params.get("include_closed_opportunities"):
                clauses.append("is_closed = 0")

        sql = (
            "SELECT record_id, name, secondary FROM lookup_records "
            f"WHERE {' AND '.join(clauses)} ORDER BY name LIMIT ?"
        )
        args.append(self.max_results)
        try:
            with sqlite3.connect(self.db_path) as conn:
                rows = conn.execute(sql, args).fetchall()
        except sqlite3.Error as exc:
            raise ProviderError(f"record search failed ({exc})") from exc

        logger.debug("Search #%d for %r returned %d rows", query.sequence, query.query_text, len(rows))
        return [Candidate(id=row[0], primary_label=row[1], secondary_label=row[2]) for row in rows]
