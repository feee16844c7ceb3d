"""SQLite database layer for candidates, evaluations, and namespaced key/value state."""

import json
import sqlite3
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from candidate_ai.core.schemas import Candidate, Evaluation

_CANDIDATES_TABLE = """
CREATE TABLE IF NOT EXISTS candidates (
    seq              INTEGER PRIMARY KEY AUTOINCREMENT,
    id               TEXT    NOT NULL UNIQUE,
    name             TEXT    NOT NULL,
    role             TEXT    NOT NULL,
    experience_years INTEGER NOT NULL DEFAULT 0,
    skills_json      TEXT    NOT NULL DEFAULT '[]',
    bio              TEXT    NOT NULL DEFAULT '',
    avatar           TEXT    NOT NULL DEFAULT '',
    achievements_json TEXT   NOT NULL DEFAULT '[]'
);
"""

# seq keeps collection order: an upsert on an existing candidate_id
# updates the row in place and so keeps its position.
_EVALUATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS evaluations (
    seq                     INTEGER PRIMARY KEY AUTOINCREMENT,
    candidate_id            TEXT NOT NULL UNIQUE,
    crisis_management_score REAL NOT NULL,
    sustainability_score    REAL NOT NULL,
    team_motivation_score   REAL NOT NULL,
    summary                 TEXT NOT NULL DEFAULT '',
    last_evaluated          TEXT NOT NULL
);
"""

_KV_TABLE = """
CREATE TABLE IF NOT EXISTS kv_store (
    namespace TEXT PRIMARY KEY,
    value     TEXT NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_CANDIDATES_TABLE)
    conn.execute(_EVALUATIONS_TABLE)
    conn.execute(_KV_TABLE)
    conn.commit()
    return conn


def insert_candidates(conn: sqlite3.Connection, candidates: Iterable[Candidate]) -> int:
    """Insert candidates, ignoring ids that already exist. Returns rows inserted."""
    inserted = 0
    for c in candidates:
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO candidates
                (id, name, role, experience_years, skills_json, bio, avatar, achievements_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                c.id,
                c.name,
                c.role,
                c.experience_years,
                json.dumps(c.skills),
                c.bio,
                c.avatar,
                json.dumps(c.achievements),
            ),
        )
        inserted += cursor.rowcount
    conn.commit()
    return inserted


def load_candidates(conn: sqlite3.Connection) -> list[Candidate]:
    """Return all candidates in insertion order."""
    rows = conn.execute("SELECT * FROM candidates ORDER BY seq").fetchall()
    return [
        Candidate(
            id=row["id"],
            name=row["name"],
            role=row["role"],
            experience_years=row["experience_years"],
            skills=json.loads(row["skills_json"]),
            bio=row["bio"],
            avatar=row["avatar"],
            achievements=json.loads(row["achievements_json"]),
        )
        for row in rows
    ]


_UPSERT_EVALUATION = """
    INSERT INTO evaluations
        (candidate_id, crisis_management_score, sustainability_score,
         team_motivation_score, summary, last_evaluated)
    VALUES (?, ?, ?, ?, ?, ?)
    ON CONFLICT(candidate_id)
    DO UPDATE SET
        crisis_management_score = excluded.crisis_management_score,
        sustainability_score = excluded.sustainability_score,
        team_motivation_score = excluded.team_motivation_score,
        summary = excluded.summary,
        last_evaluated = excluded.last_evaluated
"""


def _evaluation_row(evaluation: Evaluation) -> tuple[str, float, float, float, str, str]:
    return (
        evaluation.candidate_id,
        evaluation.crisis_management_score,
        evaluation.sustainability_score,
        evaluation.team_motivation_score,
        evaluation.summary,
        evaluation.last_evaluated.isoformat(),
    )


def upsert_evaluation(conn: sqlite3.Connection, evaluation: Evaluation) -> None:
    """Insert an evaluation or replace the existing one for the same candidate."""
    conn.execute(_UPSERT_EVALUATION, _evaluation_row(evaluation))
    conn.commit()


def load_evaluations(conn: sqlite3.Connection) -> list[Evaluation]:
    """Return all evaluations in collection order."""
    rows = conn.execute("SELECT * FROM evaluations ORDER BY seq").fetchall()
    return [
        Evaluation(
            candidate_id=row["candidate_id"],
            crisis_management_score=row["crisis_management_score"],
            sustainability_score=row["sustainability_score"],
            team_motivation_score=row["team_motivation_score"],
            summary=row["summary"],
            last_evaluated=datetime.fromisoformat(row["last_evaluated"]),
        )
        for row in rows
    ]


def replace_evaluations(conn: sqlite3.Connection, evaluations: Iterable[Evaluation]) -> None:
    """Drop every stored evaluation and write the given ones in order.

    Runs as one transaction: on failure the previous collection is kept.
    """
    rows = [_evaluation_row(e) for e in evaluations]
    with conn:
        conn.execute("DELETE FROM evaluations")
        conn.execute("DELETE FROM sqlite_sequence WHERE name = 'evaluations'")
        conn.executemany(_UPSERT_EVALUATION, rows)


def get_value(conn: sqlite3.Connection, namespace: str) -> str | None:
    """Return the raw value stored under a namespace, or None."""
    row = conn.execute(
        "SELECT value FROM kv_store WHERE namespace = ?", (namespace,)
    ).fetchone()
    if row is None:
        return None
    return row["value"]  # type: ignore[no-any-return]


def set_value(conn: sqlite3.Connection, namespace: str, value: str) -> None:
    """Store a raw value under a namespace, replacing any previous one."""
    conn.execute(
        """
        INSERT INTO kv_store (namespace, value) VALUES (?, ?)
        ON CONFLICT(namespace) DO UPDATE SET value = excluded.value
        """,
        (namespace, value),
    )
    conn.commit()


def delete_value(conn: sqlite3.Connection, namespace: str) -> None:
    """Remove a namespace. Missing namespaces are ignored."""
    conn.execute("DELETE FROM kv_store WHERE namespace = ?", (namespace,))
    conn.commit()
