# src/seo_engine/history.py
"""SEO score history stored in SQLite."""

import sqlite3
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from seo_engine.config import settings
from seo_engine.constants import (
    HISTORY_DEFAULT_LIMIT,
    HISTORY_MAX_LIMIT,
    SNAPSHOT_MIN_INTERVAL_SECONDS,
    TREND_THRESHOLD,
    TREND_WINDOW,
)
from seo_engine.lexical import js_round
from seo_engine.models import AnalysisResult
from seo_engine.scorer import summarize

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS seo_score_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    document_id TEXT NOT NULL,
    collection TEXT NOT NULL,
    score INTEGER NOT NULL,
    level TEXT,
    focus_keyword TEXT,
    word_count INTEGER,

    -- Checks summary
    checks_pass INTEGER,
    checks_warning INTEGER,
    checks_fail INTEGER,

    snapshot_date TIMESTAMP NOT NULL
);
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_seo_score_history_document
ON seo_score_history (collection, document_id, snapshot_date);
"""

REQUIRED_FIELDS = ('document_id', 'collection', 'score')

TREND_IMPROVING = 'improving'
TREND_DECLINING = 'declining'
TREND_STABLE = 'stable'


def score_trend(history: List[Dict[str, Any]]) -> Tuple[str, int]:
    """Trend of a chronological list of snapshots.

    The average of the last five scores is compared with the average of
    the five before them. With fewer than six snapshots the last score
    is compared with the first one.

    Returns:
        (trend, score_delta) where trend is improving, declining or stable
    """
    if len(history) < 2:
        return TREND_STABLE, 0

    scores = [snapshot['score'] for snapshot in history]
    recent = scores[-TREND_WINDOW:]
    previous = scores[-2 * TREND_WINDOW:-TREND_WINDOW]

    if previous:
        delta = js_round(sum(recent) / len(recent) - sum(previous) / len(previous))
    else:
        delta = scores[-1] - scores[0]

    if delta > TREND_THRESHOLD:
        return TREND_IMPROVING, delta
    if delta < -TREND_THRESHOLD:
        return TREND_DECLINING, delta
    return TREND_STABLE, delta


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ScoreHistoryDatabase:
    """SQLite store of per-document score snapshots."""

    def __init__(self, db_url: Optional[str] = None):
        """Open the history database.

        Args:
            db_url: Database URL (sqlite:///path/to/db.db). Defaults to settings.DATABASE_URL.
        """
        self.db_url = db_url or settings.DATABASE_URL
        self.db_path = self.db_url.replace("sqlite:///", "")
        self.conn: Optional[sqlite3.Connection] = None
        self.connect()
        self.create_schema()

    def connect(self) -> None:
        """Establish SQLite connection."""
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        logger.debug(f"Connected to score history database: {self.db_path}")

    def close(self) -> None:
        """Close SQLite connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Closed score history connection")

    def create_schema(self) -> None:
        """Create the history table if it doesn't exist."""
        with self.conn:
            self.conn.execute(CREATE_TABLE_SQL)
            self.conn.execute(CREATE_INDEX_SQL)
        logger.debug("Schema verified/created for score history")

    def get_table_columns(self) -> set:
        cursor = self.conn.cursor()
        cursor.execute("PRAGMA table_info(seo_score_history);")
        return {row['name'] for row in cursor.fetchall()}

    def save_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """Insert one snapshot.

        Args:
            snapshot: Column values. Must include 'document_id', 'collection'
                and 'score'; 'snapshot_date' defaults to now. Unknown keys
                are ignored.
        """
        missing = [name for name in REQUIRED_FIELDS if snapshot.get(name) is None]
        if missing:
            raise ValueError(f"The {', '.join(repr(m) for m in missing)} field(s) are required.")

        values = dict(snapshot)
        values['document_id'] = str(values['document_id'])
        values.setdefault('snapshot_date', datetime.now(timezone.utc).isoformat())
        if isinstance(values['snapshot_date'], datetime):
            values['snapshot_date'] = values['snapshot_date'].isoformat()

        table_columns = self.get_table_columns()
        valid = {k: v for k, v in values.items() if k in table_columns and k != 'id'}

        columns = ', '.join(valid.keys())
        placeholders = ', '.join('?' for _ in valid)
        insert_sql = f"INSERT INTO seo_score_history ({columns}) VALUES ({placeholders})"

        with self.conn:
            self.conn.execute(insert_sql, tuple(valid.values()))
        logger.debug(f"Saved score snapshot for {values['collection']}::{values['document_id']}")

    def last_snapshot_date(self, document_id: Any, collection: str) -> Optional[datetime]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT snapshot_date FROM seo_score_history "
            "WHERE document_id = ? AND collection = ? "
            "ORDER BY snapshot_date DESC LIMIT 1",
            (str(document_id), collection),
        )
        row = cursor.fetchone()
        return _parse_timestamp(row['snapshot_date']) if row else None

    def record_analysis(
        self,
        document_id: Any,
        collection: str,
        result: AnalysisResult,
        focus_keyword: str = "",
        word_count: int = 0,
        now: Optional[datetime] = None,
        min_interval_seconds: float = SNAPSHOT_MIN_INTERVAL_SECONDS,
    ) -> bool:
        """Store an analysis result unless the last snapshot is too recent.

        Args:
            document_id: Document identifier
            collection: Collection slug
            result: Analysis to record
            focus_keyword: Focus keyword at analysis time
            word_count: Word count at analysis time
            now: Current time (defaults to UTC now)
            min_interval_seconds: Minimum spacing between snapshots

        Returns:
            True when a snapshot was written
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        last = self.last_snapshot_date(document_id, collection)
        if last is not None and (now - last).total_seconds() < min_interval_seconds:
            logger.debug(f"Skipping snapshot for {collection}::{document_id}, last one at {last}")
            return False

        summary = summarize(result.checks)
        self.save_snapshot({
            'document_id': document_id,
            'collection': collection,
            'score': result.score,
            'level': result.level.value,
            'focus_keyword': focus_keyword or "",
            'word_count': word_count,
            'checks_pass': summary['pass'],
            'checks_warning': summary['warning'],
            'checks_fail': summary['fail'],
            'snapshot_date': now.isoformat(),
        })
        return True

    def get_history(self, document_id: Any, collection: str,
                    limit: int = HISTORY_DEFAULT_LIMIT) -> List[Dict[str, Any]]:
        """Most recent snapshots of a document, oldest first.

        ``limit`` is clamped to 1..100.
        """
        limit = min(HISTORY_MAX_LIMIT, max(1, int(limit)))
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT * FROM seo_score_history "
            "WHERE document_id = ? AND collection = ? "
            "ORDER BY snapshot_date DESC, id DESC LIMIT ?",
            (str(document_id), collection, limit),
        )
        rows = [dict(row) for row in cursor.fetchall()]
        rows.reverse()
        return [
            {
                'score': row['score'],
                'level': row['level'],
                'focus_keyword': row['focus_keyword'] or "",
                'word_count': row['word_count'] or 0,
                'checks_summary': {
                    'pass': row['checks_pass'] or 0,
                    'warning': row['checks_warning'] or 0,
                    'fail': row['checks_fail'] or 0,
                },
                'snapshot_date': row['snapshot_date'],
            }
            for row in rows
        ]

    def get_recent_scores(self) -> Dict[str, int]:
        """Latest score of every document, keyed ``collection::document_id``."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT collection, document_id, score FROM seo_score_history "
            "ORDER BY snapshot_date DESC, id DESC"
        )
        scores: Dict[str, int] = {}
        for row in cursor.fetchall():
            key = f"{row['collection']}::{row['document_id']}"
            if key not in scores:
                scores[key] = row['score']
        return scores

    def get_previous_scores(self) -> Dict[str, int]:
        """Score before the latest snapshot of every document, keyed ``collection::document_id``.

        Documents with a single snapshot are left out.
        """
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT collection, document_id, score FROM seo_score_history "
            "ORDER BY snapshot_date DESC, id DESC"
        )
        seen = set()
        scores: Dict[str, int] = {}
        for row in cursor.fetchall():
            key = f"{row['collection']}::{row['document_id']}"
            if key not in seen:
                seen.add(key)
            elif key not in scores:
                scores[key] = row['score']
        return scores
