import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


@dataclass(frozen=True)
class Migration:
    filename: str
    up: str
    down: str = ""


def parse_migration(path: Path) -> Migration:
    """Split a migration file at its Down marker; everything before it is Up."""
    up, _, down = path.read_text().partition(DOWN_MARKER)
    return Migration(filename=path.name, up=up, down=down)


class SQLiteMigrator:
    """
    Applies numbered .sql files in filename order, once each.

    Each file is applied inside one transaction together with its
    bookkeeping row in _migrations, so a failing script leaves no trace.
    """

    def __init__(self, db_path: str, migrations_dir: str | Path):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        conn.commit()
        return conn

    def available(self) -> list[Migration]:
        return [parse_migration(p) for p in sorted(self.migrations_dir.glob("*.sql"))]

    def _applied(self, conn: sqlite3.Connection) -> set[str]:
        return {row[0] for row in conn.execute("SELECT filename FROM _migrations")}

    def pending(self) -> list[str]:
        """Filenames not yet applied, in apply order."""
        conn = self._connect()
        try:
            applied = self._applied(conn)
        finally:
            conn.close()
        return [m.filename for m in self.available() if m.filename not in applied]

    def run_migrations(self) -> list[str]:
        """Apply every pending migration. Returns the filenames applied by this call."""
        conn = self._connect()
        try:
            applied = self._applied(conn)
            todo = [m for m in self.available() if m.filename not in applied]
            for migration in todo:
                logger.info("Applying migration %s", migration.filename)
                self._apply(conn, migration)
        finally:
            conn.close()

        if todo:
            logger.info("Applied %d migration(s) to %s", len(todo), self.db_path)
        return [m.filename for m in todo]

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> None:
        try:
            conn.executescript(f"BEGIN;\n{migration.up}")
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (migration.filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Migration %s failed: %s", migration.filename, e)
            raise RuntimeError(f"Migration {migration.filename} failed: {e}") from e
