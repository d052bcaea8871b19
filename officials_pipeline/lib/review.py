"""
Human review of per-jurisdiction diff batches.

All diffs for one jurisdiction are rendered as a single listing, new
officials first and then updates, and approved or rejected as a whole.
There is no per-record approval. The decision comes from an injected
``Confirmer`` so tests can script answers instead of reading a terminal.
"""

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, TextIO

from officials_pipeline.lib.checksums import Diff

logger = logging.getLogger(__name__)

AFFIRMATIVE_ANSWERS = ("", "y", "yes")


@dataclass
class BatchSummary:
    """Everything a reviewer sees for one jurisdiction."""

    jurisdiction: str
    new: List[Diff] = field(default_factory=list)
    updated: List[Diff] = field(default_factory=list)

    @property
    def diffs(self) -> List[Diff]:
        return self.new + self.updated

    def __len__(self) -> int:
        return len(self.new) + len(self.updated)

    def render(self) -> str:
        lines = [f"=== {self.jurisdiction} DRAFT CHANGES ==="]
        for diff in self.new:
            record = diff.full_record
            lines.append(
                f"• [NEW] {record.name} → Office: {diff.office_identifier} "
                f"(party: {record.party.value}, start: {record.start_date or 'n/a'})"
            )
        for diff in self.updated:
            lines.append(
                f"• [UPDATE] ID={diff.external_id} {diff.full_record.name} → "
                f"Office: {diff.office_identifier} Changes:"
            )
            for name, (old, new) in sorted(diff.changed_fields.items()):
                lines.append(f'    – {name}: "{old}" → "{new}"')
        lines.append(f"{len(self.new)} new, {len(self.updated)} updated")
        return "\n".join(lines)


def build_batch(jurisdiction: str, diffs: Iterable[Diff]) -> BatchSummary:
    """Split diffs into a deterministic, review-ordered batch."""
    ordered = sorted(diffs, key=lambda d: (d.office_identifier, d.external_id))
    return BatchSummary(
        jurisdiction=jurisdiction,
        new=[d for d in ordered if d.is_new],
        updated=[d for d in ordered if not d.is_new],
    )


class Confirmer(ABC):
    """Decides whether a batch is applied."""

    @abstractmethod
    def confirm(self, batch: BatchSummary) -> bool:
        """Return True to apply every diff in ``batch``."""


def is_affirmative(answer: Optional[str]) -> bool:
    """Empty input means yes; anything other than y/yes means no."""
    if answer is None:
        return False
    return answer.strip().lower() in AFFIRMATIVE_ANSWERS


class TerminalConfirmer(Confirmer):
    """Prints the listing and blocks on a Y/n answer from stdin."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Optional[TextIO] = None,
    ):
        self.input_func = input_func
        self.output = output or sys.stdout

    def confirm(self, batch: BatchSummary) -> bool:
        print(f"\n{batch.render()}", file=self.output)
        try:
            answer = self.input_func(
                f"\nApply all of the above changes for state {batch.jurisdiction}? (Y/n): "
            )
        except EOFError:
            logger.warning(f"No input available; rejecting {batch.jurisdiction} batch")
            return False
        return is_affirmative(answer)


class ScriptedConfirmer(Confirmer):
    """Answers from a fixed list (or a constant), recording every batch seen."""

    def __init__(self, answers=True):
        self.answers = answers
        self.seen: List[BatchSummary] = []

    def confirm(self, batch: BatchSummary) -> bool:
        self.seen.append(batch)
        if isinstance(self.answers, bool):
            return self.answers
        index = len(self.seen) - 1
        if index >= len(self.answers):
            return False
        answer = self.answers[index]
        if isinstance(answer, str):
            return is_affirmative(answer)
        return bool(answer)


class ReviewSession:
    """Runs one approve/reject decision per jurisdiction batch."""

    def __init__(self, confirmer: Confirmer):
        self.confirmer = confirmer

    def review(self, jurisdiction: str, diffs: List[Diff]) -> Optional[BatchSummary]:
        """Return the approved batch, or None when rejected.

        Callers must not invoke review for an empty diff list.
        """
        batch = build_batch(jurisdiction, diffs)
        approved = self.confirmer.confirm(batch)

        if not approved:
            logger.info(f"Skipping all {jurisdiction} changes ({len(batch)} rejected)")
            return None

        logger.info(f"Approved {len(batch)} changes for {jurisdiction}")
        return batch
