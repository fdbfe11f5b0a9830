"""Ordered strategy chains: try each level, fall back only when one fails."""

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AllStrategiesFailed(Exception):
    """Every level of a chain raised; errors are kept in order."""

    def __init__(self, label: str, errors: list[tuple[str, Exception]]):
        self.label = label
        self.errors = errors
        summary = "; ".join(f"{name}: {err}" for name, err in errors)
        super().__init__(f"All {label} strategies failed ({summary})")

    @property
    def last_error(self) -> Exception | None:
        return self.errors[-1][1] if self.errors else None


def run_strategies(
    label: str,
    strategies: Sequence[tuple[str, Callable[[], T]]],
) -> tuple[T, str, int]:
    """
    Call each strategy in order and return (result, name, level) for the
    first one that does not raise. Level numbering starts at 1.
    """
    errors: list[tuple[str, Exception]] = []
    for level, (name, attempt) in enumerate(strategies, start=1):
        try:
            result = attempt()
        except Exception as e:
            logger.warning("%s strategy '%s' (level %d) unusable: %s", label, name, level, e)
            errors.append((name, e))
            continue
        logger.info("%s strategy '%s' (level %d) used", label, name, level)
        return result, name, level
    raise AllStrategiesFailed(label, errors)
