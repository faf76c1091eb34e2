"""Fan-out helper for independent upstream calls."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

MAX_WORKERS = 8


def fan_out(fn: Callable[[T], R], items: Sequence[T], max_workers: int = MAX_WORKERS) -> List[Optional[R]]:
    """Run ``fn`` over ``items`` concurrently and wait for every branch.

    Results keep the input order. A branch that raises yields ``None`` so one
    failing call never aborts the join.
    """
    if not items:
        return []

    def _safe(item: T) -> Optional[R]:
        try:
            return fn(item)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Fan-out branch failed for %r: %s", item, exc)
            return None

    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as executor:
        return list(executor.map(_safe, items))
