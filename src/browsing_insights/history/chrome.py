"""History provider backed by a local Chrome ``History`` SQLite database."""

from __future__ import annotations

import logging
import shutil
import sqlite3
import tempfile
from pathlib import Path

from browsing_insights.exceptions import HistoryReadError
from browsing_insights.history.models import HistoryEntry, VisitEntry
from browsing_insights.history.provider import HistoryProvider

logger = logging.getLogger(__name__)

CHROME_BASE_PATH = Path.home() / "Library" / "Application Support" / "Google" / "Chrome"

# Seconds from 1601-01-01 to 1970-01-01 (Chrome epoch).
CHROME_EPOCH_OFFSET = 11644473600

# Core transition codes (low byte of visits.transition), in extension-API names.
TRANSITION_TYPES = (
    "link",
    "typed",
    "auto_bookmark",
    "auto_subframe",
    "manual_subframe",
    "generated",
    "auto_toplevel",
    "form_submit",
    "reload",
    "keyword",
    "keyword_generated",
)
_CORE_MASK = 0xFF


class ChromeHistoryProvider(HistoryProvider):
    """Read one Chrome profile's history through a temporary snapshot.

    Chrome locks its History DB while running, so every ``search`` copies the
    file and subsequent ``get_visits`` calls read that snapshot.
    The copy is deleted by ``release``, which ingest calls after each refresh.

    Args:
        history_path: Path to a profile's ``History`` file. Defaults to the
            ``Default`` profile under the standard macOS location.
    """

    def __init__(self, history_path: Path | None = None):
        self.history_path = history_path or CHROME_BASE_PATH / "Default" / "History"
        self._snapshot: Path | None = None

    def search(self, text: str = "", max_results: int = 100, start_time: int = 0) -> list[HistoryEntry]:
        pattern = f"%{_escape_like(text)}%"
        self._take_snapshot()
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT
                    COALESCE(url, '') AS url,
                    COALESCE(title, '') AS title,
                    COALESCE(visit_count, 0) AS visit_count,
                    COALESCE(typed_count, 0) AS typed_count,
                    last_visit_time
                FROM urls
                WHERE last_visit_time >= ?
                  AND (url LIKE ? ESCAPE '\\' OR title LIKE ? ESCAPE '\\')
                ORDER BY last_visit_time DESC
                LIMIT ?
                """,
                (_ms_to_chrome(start_time), pattern, pattern, max_results),
            ).fetchall()
        except sqlite3.Error as e:
            raise HistoryReadError(f"Failed querying Chrome history: {e}") from e
        finally:
            conn.close()

        return [
            HistoryEntry(
                url=row["url"],
                title=row["title"],
                last_visit_time=_chrome_to_ms(row["last_visit_time"]),
                visit_count=int(row["visit_count"]),
                typed_count=int(row["typed_count"]),
            )
            for row in rows
        ]

    def get_visits(self, url: str) -> list[VisitEntry]:
        if self._snapshot is None:
            self._take_snapshot()
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT
                    v.id AS visit_id,
                    v.visit_time AS visit_time,
                    COALESCE(v.from_visit, 0) AS from_visit,
                    COALESCE(v.transition, 0) AS transition
                FROM visits v
                JOIN urls u ON u.id = v.url
                WHERE u.url = ?
                ORDER BY v.visit_time
                """,
                (url,),
            ).fetchall()
        except sqlite3.Error as e:
            raise HistoryReadError(f"Failed querying Chrome visits for {url}: {e}") from e
        finally:
            conn.close()

        return [
            VisitEntry(
                visit_id=str(row["visit_id"]),
                visit_time=_chrome_to_ms(row["visit_time"]),
                referring_visit_id=str(row["from_visit"]),
                transition_type=transition_name(row["transition"]),
            )
            for row in rows
        ]

    def close(self) -> None:
        """Delete the temporary snapshot, if any."""
        if self._snapshot is not None:
            self._snapshot.unlink(missing_ok=True)
            self._snapshot = None

    def release(self) -> None:
        self.close()

    def _take_snapshot(self) -> None:
        if not self.history_path.exists():
            raise HistoryReadError(f"Chrome history DB not found at {self.history_path}")
        self.close()
        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(prefix="chrome-history-", suffix=".db", delete=False) as tmp:
                tmp_path = Path(tmp.name)
            shutil.copy2(self.history_path, tmp_path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise HistoryReadError(f"Failed to copy Chrome history DB {self.history_path}: {e}") from e
        logger.debug("Snapshot of %s taken at %s", self.history_path, tmp_path)
        self._snapshot = tmp_path

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(f"file:{self._snapshot}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise HistoryReadError(f"Cannot open Chrome history snapshot: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn


def transition_name(code: int | None) -> str:
    core = int(code or 0) & _CORE_MASK
    if core < len(TRANSITION_TYPES):
        return TRANSITION_TYPES[core]
    return "link"


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _chrome_to_ms(ts: int | None) -> int:
    if not ts:
        return 0
    return int(ts) // 1000 - CHROME_EPOCH_OFFSET * 1000


def _ms_to_chrome(ms: int) -> int:
    if ms <= 0:
        return 0
    return (int(ms) + CHROME_EPOCH_OFFSET * 1000) * 1000
