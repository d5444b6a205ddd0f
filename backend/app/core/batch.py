import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class BatchOutcome:
    """Summary of a best-effort operation applied to a collection"""
    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    failed_ids: List[Any] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.failed == 0


def run_batch(
    items: Iterable[T],
    operation: Callable[[T], bool],
    key: Callable[[T], Any] = lambda item: item,
    on_error: Optional[Callable[[T], None]] = None,
) -> BatchOutcome:
    """Apply `operation` to every item, tolerating per-item failures.

    `operation` returns True when the item was applied and False when it was
    skipped. An exception marks the item as failed and the loop moves on;
    `on_error` lets the caller reset state (e.g. roll back a session) first.
    """
    outcome = BatchOutcome()
    for item in items:
        outcome.total += 1
        try:
            if operation(item):
                outcome.succeeded += 1
            else:
                outcome.skipped += 1
        except Exception as e:
            item_key = key(item)
            logger.error(f"Batch item {item_key} failed: {str(e)}")
            if on_error is not None:
                on_error(item)
            outcome.failed += 1
            outcome.failed_ids.append(item_key)
    return outcome
