import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from services.evaluation import ResultStatus

logger = logging.getLogger(__name__)


@dataclass
class PublishOutcome:
    action: str
    matched_ids: List[Any] = field(default_factory=list)
    changed_ids: List[Any] = field(default_factory=list)
    # Pending results made visible: likely missed mark entry
    pending_ids: List[Any] = field(default_factory=list)
    published_date: Optional[datetime] = None

    @property
    def has_warnings(self) -> bool:
        return bool(self.pending_ids)

    def as_dict(self):
        return {
            "action": self.action,
            "matched_count": len(self.matched_ids),
            "modified_count": len(self.changed_ids),
            "published_date": self.published_date.isoformat() if self.published_date else None,
            "warnings": [
                {"result_id": result_id, "message": "Result is still Pending (marks missing)"}
                for result_id in self.pending_ids
            ],
        }


def publish_results(results: Sequence[Any], now: Optional[datetime] = None) -> PublishOutcome:
    """Unpublished -> Published. Already published results keep their original date."""
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    outcome = PublishOutcome(action="publish", published_date=now)

    for result in results:
        outcome.matched_ids.append(result.id)
        if result.result in (ResultStatus.PENDING, ResultStatus.PENDING.value):
            outcome.pending_ids.append(result.id)
        if result.is_published:
            continue
        result.is_published = True
        result.published_date = now
        outcome.changed_ids.append(result.id)

    if outcome.has_warnings:
        logger.warning(
            "Publishing %d pending result(s): %s", len(outcome.pending_ids), outcome.pending_ids
        )
    logger.info("Published %d of %d results", len(outcome.changed_ids), len(outcome.matched_ids))
    return outcome


def unpublish_results(results: Sequence[Any]) -> PublishOutcome:
    """Published -> Unpublished: clears the flag and the date."""
    outcome = PublishOutcome(action="unpublish")

    for result in results:
        outcome.matched_ids.append(result.id)
        if not result.is_published and result.published_date is None:
            continue
        result.is_published = False
        result.published_date = None
        outcome.changed_ids.append(result.id)

    logger.info("Unpublished %d of %d results", len(outcome.changed_ids), len(outcome.matched_ids))
    return outcome
