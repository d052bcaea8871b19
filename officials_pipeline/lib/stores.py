"""
Checksum Store and Change Request Sink.

These are the only persisted, shared-mutable state of the pipeline:

- ``official_checksums(official_id PK, last_checksum, updated_at)``
- ``change_requests(external_id, office_id, payload, status, created_at)``

Delivery contract: for every approved diff the orchestrator enqueues the
change request first and upserts the checksum second. A crash between the
two leaves the old checksum in place, so the next run detects the same diff
and enqueues it again. Change requests are therefore delivered AT LEAST
ONCE, never at most once, and whatever applies them must be idempotent on
``external_id`` + office (or de-duplicate by payload).

No locking is done. Running two pipeline instances against the same store
is unsupported and can produce duplicate or lost updates.

Backends:
    InMemory*  - tests and dry runs
    DuckDB*    - local database file (DATABASE_URL=duckdb:///path/to/file.duckdb)
    Supabase*  - PostgREST tables (DATABASE_URL=https://<project>.supabase.co)
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import duckdb
import requests

if TYPE_CHECKING:
    from officials_pipeline.lib.checksums import Diff
    from officials_pipeline.lib.config import PipelineConfig

logger = logging.getLogger(__name__)

CHECKSUMS_TABLE = "official_checksums"
CHANGE_REQUESTS_TABLE = "change_requests"

STATUS_PENDING = "pending"
STATUS_APPLIED = "applied"
STATUS_REJECTED = "rejected"


class PersistenceError(Exception):
    """Raised when a checksum or change request could not be read or written."""

    pass


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class ChecksumRecord:
    official_id: str
    last_checksum: str
    updated_at: str


@dataclass
class ChangeRequest:
    external_id: str
    office_id: Optional[str]
    payload: Dict[str, Any]
    status: str = STATUS_PENDING
    created_at: str = field(default_factory=_utc_now)

    @classmethod
    def from_diff(cls, diff: "Diff") -> "ChangeRequest":
        # office_id references the authoritative store's office row, which
        # this pipeline never resolves
        return cls(external_id=diff.external_id, office_id=None, payload=diff.to_payload())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# Interfaces
# =============================================================================


class ChecksumStore(ABC):
    """Last-seen fingerprint per external identity."""

    @abstractmethod
    def get(self, official_id: str) -> Optional[ChecksumRecord]:
        """Return the stored record, or None when the official is unseen."""

    @abstractmethod
    def upsert(self, official_id: str, fingerprint: str) -> ChecksumRecord:
        """Insert or overwrite the fingerprint for ``official_id``."""


class ChangeRequestSink(ABC):
    """Append-only queue of pending change requests."""

    def enqueue(self, diff: "Diff") -> ChangeRequest:
        """Durably insert one pending change request for an approved diff."""
        request = ChangeRequest.from_diff(diff)
        self.insert(request)
        return request

    @abstractmethod
    def insert(self, request: ChangeRequest) -> None:
        """Persist ``request``; must not return before it is durable."""


# =============================================================================
# In-memory
# =============================================================================


class InMemoryChecksumStore(ChecksumStore):
    def __init__(self, records: Optional[Dict[str, str]] = None):
        self.records: Dict[str, ChecksumRecord] = {}
        for official_id, fingerprint in (records or {}).items():
            self.upsert(official_id, fingerprint)

    def get(self, official_id: str) -> Optional[ChecksumRecord]:
        return self.records.get(official_id)

    def upsert(self, official_id: str, fingerprint: str) -> ChecksumRecord:
        record = ChecksumRecord(official_id, fingerprint, _utc_now())
        self.records[official_id] = record
        return record


class InMemoryChangeRequestSink(ChangeRequestSink):
    def __init__(self):
        self.requests: List[ChangeRequest] = []

    def insert(self, request: ChangeRequest) -> None:
        self.requests.append(request)


# =============================================================================
# DuckDB
# =============================================================================


class DuckDBStorage:
    """Owns the DuckDB connection and the two pipeline tables."""

    def __init__(self, path: str):
        self.path = path
        try:
            self.conn = duckdb.connect(path)
            self.conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {CHECKSUMS_TABLE} (
                    official_id VARCHAR PRIMARY KEY,
                    last_checksum VARCHAR NOT NULL,
                    updated_at VARCHAR NOT NULL
                )
            """)
            self.conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {CHANGE_REQUESTS_TABLE} (
                    external_id VARCHAR NOT NULL,
                    office_id VARCHAR,
                    payload JSON NOT NULL,
                    status VARCHAR NOT NULL,
                    created_at VARCHAR NOT NULL
                )
            """)
        except duckdb.Error as e:
            raise PersistenceError(f"Failed to open DuckDB database {path}: {e}") from e
        logger.info(f"DuckDB storage ready: {path}")

    def close(self) -> None:
        self.conn.close()


class DuckDBChecksumStore(ChecksumStore):
    def __init__(self, storage: DuckDBStorage):
        self.storage = storage

    def get(self, official_id: str) -> Optional[ChecksumRecord]:
        try:
            row = self.storage.conn.execute(
                f"SELECT official_id, last_checksum, updated_at FROM {CHECKSUMS_TABLE} "
                f"WHERE official_id = ?",
                [official_id],
            ).fetchone()
        except duckdb.Error as e:
            raise PersistenceError(f"Error fetching checksum for {official_id}: {e}") from e
        return ChecksumRecord(*row) if row else None

    def upsert(self, official_id: str, fingerprint: str) -> ChecksumRecord:
        record = ChecksumRecord(official_id, fingerprint, _utc_now())
        try:
            self.storage.conn.execute(
                f"INSERT INTO {CHECKSUMS_TABLE} (official_id, last_checksum, updated_at) "
                f"VALUES (?, ?, ?) "
                f"ON CONFLICT (official_id) DO UPDATE SET "
                f"last_checksum = excluded.last_checksum, updated_at = excluded.updated_at",
                [record.official_id, record.last_checksum, record.updated_at],
            )
        except duckdb.Error as e:
            raise PersistenceError(f"Error upserting checksum for {official_id}: {e}") from e
        return record


class DuckDBChangeRequestSink(ChangeRequestSink):
    def __init__(self, storage: DuckDBStorage):
        self.storage = storage

    def insert(self, request: ChangeRequest) -> None:
        try:
            self.storage.conn.execute(
                f"INSERT INTO {CHANGE_REQUESTS_TABLE} "
                f"(external_id, office_id, payload, status, created_at) VALUES (?, ?, ?, ?, ?)",
                [
                    request.external_id,
                    request.office_id,
                    json.dumps(request.payload),
                    request.status,
                    request.created_at,
                ],
            )
        except duckdb.Error as e:
            raise PersistenceError(
                f"Error creating change request for {request.external_id}: {e}"
            ) from e


# =============================================================================
# Supabase (PostgREST)
# =============================================================================


class SupabaseRestClient:
    """Minimal PostgREST client authenticated with the service role key."""

    def __init__(self, url: str, service_key: str, timeout: int = 30):
        self.rest_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        }

    def request(self, method: str, table: str, **kwargs) -> requests.Response:
        headers = dict(self.headers)
        headers.update(kwargs.pop("headers", {}))
        url = f"{self.rest_url}/{table}"
        try:
            response = requests.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise PersistenceError(f"Supabase {method} {table} failed: {e}") from e
        return response


class SupabaseChecksumStore(ChecksumStore):
    def __init__(self, client: SupabaseRestClient):
        self.client = client

    def get(self, official_id: str) -> Optional[ChecksumRecord]:
        response = self.client.request(
            "GET",
            CHECKSUMS_TABLE,
            params={"official_id": f"eq.{official_id}", "select": "*"},
        )
        try:
            rows = response.json()
        except ValueError as e:
            raise PersistenceError(f"Invalid checksum response for {official_id}: {e}") from e
        if not rows:
            return None
        row = rows[0]
        return ChecksumRecord(row["official_id"], row["last_checksum"], row.get("updated_at"))

    def upsert(self, official_id: str, fingerprint: str) -> ChecksumRecord:
        record = ChecksumRecord(official_id, fingerprint, _utc_now())
        self.client.request(
            "POST",
            CHECKSUMS_TABLE,
            params={"on_conflict": "official_id"},
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            json=asdict(record),
        )
        return record


class SupabaseChangeRequestSink(ChangeRequestSink):
    def __init__(self, client: SupabaseRestClient):
        self.client = client

    def insert(self, request: ChangeRequest) -> None:
        self.client.request(
            "POST",
            CHANGE_REQUESTS_TABLE,
            headers={"Prefer": "return=minimal"},
            json=request.to_dict(),
        )


# =============================================================================
# Factory
# =============================================================================


def build_stores(config: "PipelineConfig") -> Tuple[ChecksumStore, ChangeRequestSink]:
    """Create the checksum store and change request sink for DATABASE_URL."""
    url = config.database_url

    if url.startswith("duckdb://"):
        storage = DuckDBStorage(url[len("duckdb://"):] or ":memory:")
        return DuckDBChecksumStore(storage), DuckDBChangeRequestSink(storage)

    if url.startswith(("http://", "https://")):
        client = SupabaseRestClient(url, config.supabase_service_role_key, config.http_timeout)
        return SupabaseChecksumStore(client), SupabaseChangeRequestSink(client)

    if url == "memory://":
        logger.warning("Using in-memory stores; nothing will be persisted")
        return InMemoryChecksumStore(), InMemoryChangeRequestSink()

    raise ValueError(f"Unsupported DATABASE_URL scheme: {url}")
