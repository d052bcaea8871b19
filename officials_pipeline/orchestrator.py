"""
Officials Pipeline Orchestrator

Runs the sync for each jurisdiction, one after another:

    fetch (adapters) -> normalize -> diff (checksum engine)   pure stages
    review (confirmer) -> apply (sink, then checksum store)   effectful stage

Jurisdictions are processed sequentially on purpose: both upstream APIs are
rate limited under a single shared key, and review needs a human's
attention. Each jurisdiction sits inside its own failure boundary, and each
approved diff is persisted independently of the rest of its batch.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from officials_pipeline.lib.api_contracts import Official
from officials_pipeline.lib.checksums import ChecksumEngine, Diff
from officials_pipeline.lib.notifier import LogNotifier, Notifier
from officials_pipeline.lib.review import BatchSummary, ReviewSession
from officials_pipeline.lib.stores import ChangeRequestSink, ChecksumStore, PersistenceError

logger = logging.getLogger(__name__)

STATUS_NO_CHANGES = "no_changes"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
STATUS_FAILED = "failed"


@dataclass
class JurisdictionResult:
    jurisdiction: str
    status: str
    diffs_found: int = 0
    applied: int = 0
    failures: int = 0
    error: Optional[str] = None


@dataclass
class RunSummary:
    """Aggregate counts for one pipeline run."""

    run_date: str
    jurisdictions_total: int = 0
    jurisdictions_processed: int = 0
    jurisdictions_approved: int = 0
    jurisdictions_rejected: List[str] = field(default_factory=list)
    jurisdictions_failed: List[str] = field(default_factory=list)
    change_requests_created: int = 0
    change_request_failures: int = 0

    @property
    def jurisdictions_skipped(self) -> int:
        return len(self.jurisdictions_rejected) + len(self.jurisdictions_failed)

    @property
    def errors(self) -> int:
        return len(self.jurisdictions_failed) + self.change_request_failures

    def record(self, result: JurisdictionResult) -> None:
        self.jurisdictions_total += 1
        self.change_requests_created += result.applied
        self.change_request_failures += result.failures

        if result.status == STATUS_FAILED:
            self.jurisdictions_failed.append(result.jurisdiction)
        elif result.status == STATUS_REJECTED:
            self.jurisdictions_rejected.append(result.jurisdiction)
        else:
            self.jurisdictions_processed += 1
            if result.status == STATUS_APPROVED:
                self.jurisdictions_approved += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_date": self.run_date,
            "jurisdictions_total": self.jurisdictions_total,
            "jurisdictions_processed": self.jurisdictions_processed,
            "jurisdictions_approved": self.jurisdictions_approved,
            "jurisdictions_skipped": self.jurisdictions_skipped,
            "jurisdictions_rejected": list(self.jurisdictions_rejected),
            "jurisdictions_failed": list(self.jurisdictions_failed),
            "change_requests_created": self.change_requests_created,
            "change_request_failures": self.change_request_failures,
            "errors": self.errors,
        }

    def render(self) -> str:
        lines = [
            "Officials Pipeline Summary",
            f"- Date: {self.run_date}",
            f"- Jurisdictions processed: {self.jurisdictions_processed}/{self.jurisdictions_total}",
            f"- Change requests created: {self.change_requests_created}",
            f"- Jurisdictions rejected: {', '.join(self.jurisdictions_rejected) or 'none'}",
            f"- Jurisdictions failed: {', '.join(self.jurisdictions_failed) or 'none'}",
            f"- Errors: {self.errors}",
        ]
        return "\n".join(lines)


class RunOrchestrator:
    """Drives one pipeline run across a fixed list of jurisdictions."""

    def __init__(
        self,
        sources: Sequence[Any],
        engine: ChecksumEngine,
        review: ReviewSession,
        sink: ChangeRequestSink,
        checksum_store: ChecksumStore,
        notifier: Optional[Notifier] = None,
        run_date: Optional[date] = None,
    ):
        """
        Args:
            sources: Adapters exposing ``fetch(jurisdiction, run_date)``
            engine: Classifies officials against the checksum store
            review: Collects the approve/reject decision per jurisdiction
            sink: Destination for approved change requests
            checksum_store: Updated after each successful enqueue
            notifier: Receives the run summary (defaults to logging it)
            run_date: Archive date for the whole run (defaults to today, UTC)
        """
        self.sources = list(sources)
        self.engine = engine
        self.review = review
        self.sink = sink
        self.checksum_store = checksum_store
        self.notifier = notifier or LogNotifier()
        self.run_date = run_date or datetime.now(timezone.utc).date()

    def run(self, jurisdictions: Sequence[str]) -> RunSummary:
        summary = RunSummary(run_date=self.run_date.isoformat())
        logger.info(f"Starting officials pipeline for {len(jurisdictions)} jurisdictions ({summary.run_date})")

        for jurisdiction in jurisdictions:
            summary.record(self.process_jurisdiction(jurisdiction))

        logger.info(
            f"Pipeline completed: {summary.change_requests_created} change requests created, "
            f"{summary.jurisdictions_processed}/{summary.jurisdictions_total} jurisdictions processed, "
            f"{summary.errors} errors"
        )

        try:
            self.notifier.notify(summary)
        except Exception as e:
            logger.error(f"Failed to send run summary: {e}")

        return summary

    def process_jurisdiction(self, jurisdiction: str) -> JurisdictionResult:
        """Run every stage for one jurisdiction; never raises."""
        logger.info(f"Processing {jurisdiction}...")
        try:
            diffs = self.detect_changes(jurisdiction)
            if not diffs:
                logger.info(f"No changes found for {jurisdiction}")
                return JurisdictionResult(jurisdiction, STATUS_NO_CHANGES)

            batch = self.review.review(jurisdiction, diffs)
            if batch is None:
                return JurisdictionResult(jurisdiction, STATUS_REJECTED, diffs_found=len(diffs))

            applied, failures = self.apply(batch)
            logger.info(f"Applied {applied}/{len(batch)} changes for {jurisdiction}")
            return JurisdictionResult(
                jurisdiction, STATUS_APPROVED, diffs_found=len(diffs), applied=applied, failures=failures
            )
        except Exception as e:
            logger.exception(f"Error processing {jurisdiction}, continuing to next jurisdiction: {e}")
            return JurisdictionResult(jurisdiction, STATUS_FAILED, error=str(e))

    def collect(self, jurisdiction: str) -> List[Official]:
        officials = []
        for source in self.sources:
            found = source.fetch(jurisdiction, self.run_date)
            logger.info(f"Found {len(found)} officials from {type(source).__name__} for {jurisdiction}")
            officials.extend(found)
        return officials

    def detect_changes(self, jurisdiction: str) -> List[Diff]:
        return self.engine.classify(self.collect(jurisdiction))

    def apply(self, batch: BatchSummary):
        """Enqueue then checkpoint each diff; returns (applied, failures)."""
        applied = 0
        failures = 0

        for diff in batch.diffs:
            try:
                self.sink.enqueue(diff)
                self.checksum_store.upsert(diff.external_id, diff.new_fingerprint)
            except PersistenceError as e:
                logger.error(f"Failed to apply change for {diff.external_id}: {e}")
                failures += 1
                continue
            applied += 1

        return applied, failures
