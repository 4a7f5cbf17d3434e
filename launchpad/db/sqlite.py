"""
Launchpad SQLite store
======================

Persistent `OfferingStore` for a single-writer service. Offerings and
participants are stored as JSON blobs next to a few indexed columns; the
claimed bitmap is stored as one row per 256-bit word (hex text, since SQLite
integers are 64-bit).

Design notes
------------
- Single-writer, many-reader friendly via WAL.
- Schema versioned in a `meta` table.
- `tx()` opens `BEGIN IMMEDIATE` at the outermost level and a SAVEPOINT for
  each nested level, so inner failures roll back only their own writes.

Example
-------
    db = SQLiteOfferingStore("launchpad.db")
    svc = GiveawayService(address=..., store=db, ledger=..., identity=...)
"""
from __future__ import annotations

import contextlib
import json
import sqlite3
import threading
import time
from typing import Any, Iterator, List, Optional

from launchpad.errors import AlreadyDeposited, OfferingNotFound
from launchpad.lptypes.address import Address, normalize_address
from launchpad.lptypes.offering import Offering, Participant

from .base import bit_position


def _now_s() -> int:
    return int(time.time())


def _to_json_blob(obj: Any) -> bytes:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _from_json_blob(blob: Optional[bytes]) -> Any:
    if not blob:
        return None
    return json.loads(blob.decode("utf-8"))


class SQLiteOfferingStore:
    SCHEMA_VERSION = 1

    def __init__(self, path: str) -> None:
        """`path` may be a filesystem path, ":memory:" or a "file:" URI."""
        uri = path.startswith("file:")
        self._db = sqlite3.connect(
            path,
            uri=uri,
            check_same_thread=False,
            isolation_level=None,  # autocommit; transactions are explicit
        )
        self._db.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._depth = 0
        self._apply_pragmas()
        with self.tx():
            self._migrate()

    # -- lifecycle -------------------------------------------------------------

    def close(self) -> None:
        with self._lock:
            self._db.close()

    @contextlib.contextmanager
    def tx(self) -> Iterator[None]:
        with self._lock:
            if self._depth == 0:
                begin, commit, rollback = "BEGIN IMMEDIATE", "COMMIT", "ROLLBACK"
            else:
                sp = f"sp_{self._depth}"
                begin, commit, rollback = f"SAVEPOINT {sp}", f"RELEASE {sp}", f"ROLLBACK TO {sp}"
            self._db.execute(begin)
            self._depth += 1
            try:
                yield
            except BaseException:
                self._depth -= 1
                self._db.execute(rollback)
                if self._depth:
                    # ROLLBACK TO keeps the savepoint open; release it.
                    self._db.execute(commit)
                raise
            else:
                self._depth -= 1
                self._db.execute(commit)

    def _apply_pragmas(self) -> None:
        cur = self._db.cursor()
        cur.execute("PRAGMA journal_mode=WAL")
        cur.execute("PRAGMA synchronous=NORMAL")
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    _SCHEMA = (
        """
        CREATE TABLE IF NOT EXISTS meta (
            key   TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS offerings (
            offering_id INTEGER PRIMARY KEY,
            owner       TEXT NOT NULL,
            token       TEXT NOT NULL,
            body        BLOB NOT NULL,
            updated_at  INTEGER NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_offerings_owner ON offerings(owner)",
        """
        CREATE TABLE IF NOT EXISTS participants (
            offering_id INTEGER NOT NULL,
            address     TEXT NOT NULL,
            seq         INTEGER NOT NULL,
            body        BLOB NOT NULL,
            PRIMARY KEY (offering_id, address),
            FOREIGN KEY (offering_id) REFERENCES offerings(offering_id) ON DELETE CASCADE
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_participants_seq ON participants(offering_id, seq)",
        """
        CREATE TABLE IF NOT EXISTS claimed_words (
            offering_id INTEGER NOT NULL,
            word        INTEGER NOT NULL,
            bits        TEXT NOT NULL,
            PRIMARY KEY (offering_id, word)
        )
        """,
    )

    def _migrate(self) -> None:
        # executescript() would commit the surrounding transaction.
        cur = self._db.cursor()
        for stmt in self._SCHEMA:
            cur.execute(stmt)
        cur.execute("SELECT value FROM meta WHERE key='schema_version'")
        if cur.fetchone() is None:
            cur.execute(
                "INSERT INTO meta(key, value) VALUES('schema_version', ?)",
                (str(self.SCHEMA_VERSION),),
            )
        cur.execute("SELECT value FROM meta WHERE key='next_offering_id'")
        if cur.fetchone() is None:
            cur.execute("INSERT INTO meta(key, value) VALUES('next_offering_id', '1')")
        cur.close()

    # ---- offerings -----------------------------------------------------------

    def next_offering_id(self) -> int:
        with self.tx():
            row = self._db.execute("SELECT value FROM meta WHERE key='next_offering_id'").fetchone()
            oid = int(row["value"])
            self._db.execute("UPDATE meta SET value=? WHERE key='next_offering_id'", (str(oid + 1),))
            return oid

    def put_offering(self, offering: Offering) -> None:
        with self._lock:
            self._db.execute(
                """
                INSERT INTO offerings(offering_id, owner, token, body, updated_at)
                VALUES(?, ?, ?, ?, ?)
                ON CONFLICT(offering_id) DO UPDATE SET
                    owner=excluded.owner, token=excluded.token,
                    body=excluded.body, updated_at=excluded.updated_at
                """,
                (offering.offering_id, offering.owner, offering.token, _to_json_blob(offering.to_dict()), _now_s()),
            )

    def get_offering(self, offering_id: int) -> Offering:
        with self._lock:
            row = self._db.execute("SELECT body FROM offerings WHERE offering_id=?", (offering_id,)).fetchone()
        if row is None:
            raise OfferingNotFound(offering_id)
        return Offering.from_dict(_from_json_blob(row["body"]))

    def offering_ids(self) -> List[int]:
        with self._lock:
            rows = self._db.execute("SELECT offering_id FROM offerings ORDER BY offering_id").fetchall()
        return [int(r["offering_id"]) for r in rows]

    # ---- participants --------------------------------------------------------

    def add_participant(self, offering_id: int, participant: Participant) -> None:
        addr = normalize_address(participant.address)
        with self._lock:
            try:
                self._db.execute(
                    "INSERT INTO participants(offering_id, address, seq, body) VALUES(?, ?, ?, ?)",
                    (offering_id, addr, participant.seq, _to_json_blob(participant.to_dict())),
                )
            except sqlite3.IntegrityError as e:
                raise AlreadyDeposited(
                    "address already deposited",
                    details={"offering_id": offering_id, "address": addr},
                ) from e

    def get_participant(self, offering_id: int, address: Address) -> Optional[Participant]:
        with self._lock:
            row = self._db.execute(
                "SELECT body FROM participants WHERE offering_id=? AND address=?",
                (offering_id, normalize_address(address)),
            ).fetchone()
        return Participant.from_dict(_from_json_blob(row["body"])) if row else None

    def participants(self, offering_id: int) -> List[Participant]:
        with self._lock:
            rows = self._db.execute(
                "SELECT body FROM participants WHERE offering_id=? ORDER BY seq",
                (offering_id,),
            ).fetchall()
        return [Participant.from_dict(_from_json_blob(r["body"])) for r in rows]

    # ---- claimed bitmap ------------------------------------------------------

    def _word(self, offering_id: int, word: int) -> int:
        row = self._db.execute(
            "SELECT bits FROM claimed_words WHERE offering_id=? AND word=?",
            (offering_id, word),
        ).fetchone()
        return int(row["bits"], 16) if row else 0

    def is_claimed(self, offering_id: int, index: int) -> bool:
        word, bit = bit_position(index)
        with self._lock:
            return bool((self._word(offering_id, word) >> bit) & 1)

    def set_claimed(self, offering_id: int, index: int) -> None:
        word, bit = bit_position(index)
        with self._lock:
            bits = self._word(offering_id, word) | (1 << bit)
            self._db.execute(
                """
                INSERT INTO claimed_words(offering_id, word, bits) VALUES(?, ?, ?)
                ON CONFLICT(offering_id, word) DO UPDATE SET bits=excluded.bits
                """,
                (offering_id, word, format(bits, "x")),
            )


__all__ = ["SQLiteOfferingStore"]
