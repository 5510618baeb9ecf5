"""Error-pattern aggregation over execution logs."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import reduce

from tf_reconcile_reader.models import COMMON_TERRAFORM_ERRORS, ExecutionLog

MAX_AGGREGATION_WORKERS = 8


def tally_log_errors(
    log: ExecutionLog,
    patterns: Sequence[str] = COMMON_TERRAFORM_ERRORS,
) -> Counter[str]:
    """Count which error patterns appear in one log's combined output."""
    output = f"{log.stdout}\n{log.stderr}"
    return Counter(pattern for pattern in patterns if pattern in output)


def _merge(total: Counter[str], partial: Counter[str]) -> Counter[str]:
    total.update(partial)
    return total


def aggregate_errors(
    logs: Iterable[ExecutionLog],
    patterns: Sequence[str] = COMMON_TERRAFORM_ERRORS,
    max_workers: int = MAX_AGGREGATION_WORKERS,
) -> dict[str, int]:
    """Count, per pattern, how many logs mention it.

    Each worker returns its own tally; the tallies are merged in one serial
    reduction so the result does not depend on scheduling order.
    """
    logs = list(logs)
    if not logs:
        return {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(logs)))) as pool:
        partials = list(pool.map(lambda log: tally_log_errors(log, patterns), logs))
    totals = reduce(_merge, partials, Counter())
    return {pattern: totals[pattern] for pattern in patterns if totals[pattern]}


__all__ = [
    "aggregate_errors",
    "tally_log_errors",
]
