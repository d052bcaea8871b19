"""Fingerprint-based change detection for normalized officials.

Each official is reduced to an MD5 fingerprint over
``name | party | start_date | office_identifier`` and compared with the last
fingerprint persisted for its ``external_id``:

    no stored record      -> New
    stored, different     -> Updated
    stored, identical     -> Unchanged (dropped)

Only those four fields take part. A changed phone number or email is
invisible here, and because prior field values are not retained an Updated
diff can say *that* the record changed but not which field did.

Classification only reads the checksum store. Fingerprints are written by
the orchestrator after the matching change request is enqueued.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from officials_pipeline.lib.api_contracts import Official
from officials_pipeline.lib.stores import ChecksumStore

logger = logging.getLogger(__name__)


def compute_fingerprint(
    name: str,
    party: Optional[str],
    start_date: Optional[str],
    office_identifier: str,
) -> str:
    """Deterministic hex digest of the change-tracked fields."""
    data = f"{name}|{party or ''}|{start_date or ''}|{office_identifier}"
    return hashlib.md5(data.encode("utf-8")).hexdigest()


def fingerprint_official(official: Official) -> str:
    return compute_fingerprint(
        official.name,
        official.party.value,
        official.start_date,
        official.office_identifier,
    )


@dataclass
class Diff:
    """A detected New or Updated official awaiting review."""

    external_id: str
    office_identifier: str
    is_new: bool
    full_record: Official
    new_fingerprint: str
    previous_fingerprint: Optional[str] = None
    changed_fields: Dict[str, List[Optional[str]]] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        """Change request payload for this diff."""
        record = self.full_record.model_dump(mode="json")
        if self.is_new:
            return {"new_official": record}
        payload: Dict[str, Any] = dict(self.changed_fields)
        payload["updated_official"] = record
        return payload


class ChecksumEngine:
    """Classifies officials against a checksum store."""

    def __init__(self, store: ChecksumStore):
        self.store = store

    def classify(self, officials: Iterable[Official]) -> List[Diff]:
        """Return New and Updated diffs, in input order; Unchanged are dropped."""
        diffs = []
        seen = set()

        for official in officials:
            if official.external_id in seen:
                logger.warning(
                    f"Duplicate external_id {official.external_id} in batch; "
                    f"keeping first occurrence"
                )
                continue
            seen.add(official.external_id)

            diff = self.classify_one(official)
            if diff is not None:
                diffs.append(diff)

        return diffs

    def classify_one(self, official: Official) -> Optional[Diff]:
        new_fingerprint = fingerprint_official(official)
        existing = self.store.get(official.external_id)

        if existing is None:
            return Diff(
                external_id=official.external_id,
                office_identifier=official.office_identifier,
                is_new=True,
                full_record=official,
                new_fingerprint=new_fingerprint,
            )

        if existing.last_checksum == new_fingerprint:
            return None

        return Diff(
            external_id=official.external_id,
            office_identifier=official.office_identifier,
            is_new=False,
            full_record=official,
            new_fingerprint=new_fingerprint,
            previous_fingerprint=existing.last_checksum,
            changed_fields={"checksum": [existing.last_checksum, new_fingerprint]},
        )
