"""Repository layer responsible for all database access."""

from __future__ import annotations

import random
import sqlite3
from collections import defaultdict
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional

from marchen.domain.models import Event, EventStatus, EventVendorRecord, VendorPriority
from marchen.utils.config import Settings, get_settings
from marchen.utils.logger import get_logger


logger = get_logger(__name__)

EVENT_COLUMNS = (
    "title",
    "location",
    "event_date",
    "max_vendors",
    "area_sq_m",
    "expected_visitors",
    "duration_hours",
)


class DataRepository:
    """Encapsulates SQLite access so planning logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Events (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        title TEXT NOT NULL,
                        location TEXT,
                        event_date TEXT,
                        max_vendors INTEGER,
                        area_sq_m REAL,
                        expected_visitors INTEGER,
                        duration_hours REAL,
                        status TEXT NOT NULL DEFAULT 'DRAFT',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Vendors (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL UNIQUE,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS EventVendors (
                        event_id INTEGER NOT NULL,
                        vendor_id INTEGER NOT NULL,
                        priority TEXT NOT NULL
                            CHECK (priority IN ('MUST_HAVE', 'NICE_TO_HAVE', 'BACKUP')),
                        PRIMARY KEY (event_id, vendor_id),
                        FOREIGN KEY (event_id) REFERENCES Events(id),
                        FOREIGN KEY (vendor_id) REFERENCES Vendors(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS VendorAvailability (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        event_id INTEGER NOT NULL,
                        vendor_id INTEGER NOT NULL,
                        available_date TEXT NOT NULL,
                        UNIQUE (event_id, vendor_id, available_date),
                        FOREIGN KEY (event_id, vendor_id)
                            REFERENCES EventVendors(event_id, vendor_id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_availability_event_vendor
                    ON VendorAvailability(event_id, vendor_id);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_demo_data(self) -> int:
        """Seed one demo marché with vendors only when no events exist.

        Returns the number of availability rows written (0 when skipped).
        """
        rng = random.Random(self._settings.demo_random_seed)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) AS count FROM Events;")
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Demo data already present; skipping seed")
                    return 0

                cursor.execute(
                    """
                    INSERT INTO Events (
                        title, location, event_date, max_vendors,
                        area_sq_m, expected_visitors, duration_hours, status
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        "Spring Bread Marché",
                        "Riverside Park",
                        None,
                        30,
                        2500.0,
                        None,
                        6.0,
                        EventStatus.DRAFT.value,
                    ),
                )
                event_id = int(cursor.lastrowid)

                vendors = [
                    ("Boulangerie Soleil", VendorPriority.MUST_HAVE),
                    ("Pain de Mie Kobo", VendorPriority.MUST_HAVE),
                    ("Croissant Atelier", VendorPriority.NICE_TO_HAVE),
                    ("Bagel Corner", VendorPriority.NICE_TO_HAVE),
                    ("Melonpan Stand", VendorPriority.NICE_TO_HAVE),
                    ("Sourdough Lab", VendorPriority.BACKUP),
                    ("Curry Pan House", VendorPriority.BACKUP),
                ]
                window_start = date(2026, 4, 1)
                availability_rows = []
                for name, priority in vendors:
                    cursor.execute("INSERT INTO Vendors (name) VALUES (?);", (name,))
                    vendor_id = int(cursor.lastrowid)
                    cursor.execute(
                        "INSERT INTO EventVendors (event_id, vendor_id, priority) VALUES (?, ?, ?);",
                        (event_id, vendor_id, priority.value),
                    )
                    for offset in range(30):
                        if rng.random() < 0.5:
                            day = window_start + timedelta(days=offset)
                            availability_rows.append((event_id, vendor_id, day.isoformat()))

                cursor.executemany(
                    """
                    INSERT INTO VendorAvailability (event_id, vendor_id, available_date)
                    VALUES (?, ?, ?);
                    """,
                    availability_rows,
                )
                conn.commit()
            logger.info(
                "Demo seed completed | event_id=%s | availability_rows=%s",
                event_id,
                len(availability_rows),
            )
            return len(availability_rows)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Demo data seeding failed: {exc}") from exc

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> Event:
        return Event(
            event_id=int(row["id"]),
            title=str(row["title"]),
            location=row["location"],
            event_date=row["event_date"],
            max_vendors=None if row["max_vendors"] is None else int(row["max_vendors"]),
            area_sq_m=None if row["area_sq_m"] is None else float(row["area_sq_m"]),
            expected_visitors=(
                None if row["expected_visitors"] is None else int(row["expected_visitors"])
            ),
            duration_hours=None if row["duration_hours"] is None else float(row["duration_hours"]),
            status=EventStatus(row["status"]),
        )

    def create_event(
        self,
        title: str,
        location: Optional[str] = None,
        event_date: Optional[str] = None,
        max_vendors: Optional[int] = None,
        area_sq_m: Optional[float] = None,
        expected_visitors: Optional[int] = None,
        duration_hours: Optional[float] = None,
        status: EventStatus = EventStatus.DRAFT,
    ) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Events (
                    title, location, event_date, max_vendors,
                    area_sq_m, expected_visitors, duration_hours, status
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    title,
                    location,
                    event_date,
                    max_vendors,
                    area_sq_m,
                    expected_visitors,
                    duration_hours,
                    status.value,
                ),
            )
            conn.commit()
            return int(cursor.lastrowid)

    def get_event(self, event_id: int) -> Optional[Event]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Events WHERE id = ?;", (event_id,))
            row = cursor.fetchone()
            if row is None:
                return None
            return self._row_to_event(row)

    def list_events(self) -> list[Event]:
        """Return events ordered by date, undated events last."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT *
                FROM Events
                ORDER BY event_date IS NULL, event_date ASC, id ASC;
                """
            )
            return [self._row_to_event(row) for row in cursor.fetchall()]

    def update_event(self, event_id: int, **fields: object) -> None:
        """Overwrite the given event columns; unknown column names are rejected."""
        unknown = set(fields) - set(EVENT_COLUMNS) - {"status"}
        if unknown:
            raise ValueError(f"Unknown event fields: {sorted(unknown)}")
        if not fields:
            return
        values = [
            value.value if isinstance(value, EventStatus) else value
            for value in fields.values()
        ]
        assignments = ", ".join(f"{column} = ?" for column in fields)
        with self._connect() as conn:
            conn.execute(
                f"UPDATE Events SET {assignments} WHERE id = ?;",
                (*values, event_id),
            )
            conn.commit()

    def get_or_create_vendor(self, name: str) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id FROM Vendors WHERE name = ?;", (name,))
            row = cursor.fetchone()
            if row is not None:
                return int(row["id"])
            cursor.execute("INSERT INTO Vendors (name) VALUES (?);", (name,))
            conn.commit()
            return int(cursor.lastrowid)

    def upsert_event_vendor(
        self,
        event_id: int,
        vendor_id: int,
        priority: VendorPriority,
        available_dates: Iterable[str],
    ) -> None:
        """Set a vendor's tier for an event and replace its available dates."""
        unique_dates = sorted(set(available_dates))
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO EventVendors (event_id, vendor_id, priority)
                VALUES (?, ?, ?)
                ON CONFLICT(event_id, vendor_id) DO UPDATE SET priority = excluded.priority;
                """,
                (event_id, vendor_id, priority.value),
            )
            cursor.execute(
                "DELETE FROM VendorAvailability WHERE event_id = ? AND vendor_id = ?;",
                (event_id, vendor_id),
            )
            cursor.executemany(
                """
                INSERT INTO VendorAvailability (event_id, vendor_id, available_date)
                VALUES (?, ?, ?);
                """,
                [(event_id, vendor_id, value) for value in unique_dates],
            )
            conn.commit()

    def list_event_vendors(self, event_id: int) -> list[EventVendorRecord]:
        """Return every vendor registered for the event with its available dates."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT ev.vendor_id, v.name, ev.priority
                FROM EventVendors AS ev
                INNER JOIN Vendors AS v ON v.id = ev.vendor_id
                WHERE ev.event_id = ?
                ORDER BY ev.vendor_id ASC;
                """,
                (event_id,),
            )
            vendor_rows = cursor.fetchall()
            cursor.execute(
                """
                SELECT vendor_id, available_date
                FROM VendorAvailability
                WHERE event_id = ?
                ORDER BY available_date ASC;
                """,
                (event_id,),
            )
            dates_by_vendor: dict[int, list[str]] = defaultdict(list)
            for row in cursor.fetchall():
                dates_by_vendor[int(row["vendor_id"])].append(str(row["available_date"]))

        return [
            EventVendorRecord(
                vendor_id=int(row["vendor_id"]),
                vendor_name=str(row["name"]),
                priority=VendorPriority(row["priority"]),
                available_dates=dates_by_vendor.get(int(row["vendor_id"]), []),
            )
            for row in vendor_rows
        ]

    def count_availability_rows(self, event_id: Optional[int] = None) -> int:
        """Return persisted availability count for diagnostics and tests."""
        with self._connect() as conn:
            cursor = conn.cursor()
            if event_id is None:
                cursor.execute("SELECT COUNT(*) AS count FROM VendorAvailability;")
            else:
                cursor.execute(
                    "SELECT COUNT(*) AS count FROM VendorAvailability WHERE event_id = ?;",
                    (event_id,),
                )
            return int(cursor.fetchone()["count"])
