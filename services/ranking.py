import logging
from typing import Any, FrozenSet, List, Sequence, Tuple

from services.evaluation import ResultStatus

logger = logging.getLogger(__name__)


def _status(result) -> str:
    status = result.result
    return status.value if isinstance(status, ResultStatus) else status


def rank_results(results: Sequence[Any]) -> List[Any]:
    """
    Assign competition-ranking positions over one exam/class(/section) cohort.

    Sorted by percentage descending; equal percentages share a position and the
    next distinct percentage gets its 1-based index (90, 90, 80 -> 1, 1, 3).
    There is no secondary tie-break key. Pending results are left out and get
    position None. Returns the ranked results in position order.
    """
    ranked = []
    for result in results:
        if _status(result) == ResultStatus.PENDING.value:
            result.position = None
        else:
            ranked.append(result)

    # student_id only fixes the output order inside a tie, never the position
    ranked.sort(key=lambda r: (-(r.percentage or 0), r.student_id))

    current_position = 0
    last_percentage = None
    for index, result in enumerate(ranked):
        percentage = result.percentage or 0
        if last_percentage is None or percentage != last_percentage:
            current_position = index + 1
        result.position = current_position
        last_percentage = percentage

    logger.info("Ranked %d results (%d pending skipped)", len(ranked), len(results) - len(ranked))
    return ranked


def cohort_fingerprint(results: Sequence[Any]) -> FrozenSet[Tuple[Any, Any]]:
    """Identity of a cohort snapshot; any insert, delete or status change alters it."""
    return frozenset((r.id, _status(r)) for r in results)
