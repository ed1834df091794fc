"""Derive the reported grade from a user's finished attempts.

Grades are `decimal.Decimal`, quantized to the assessment's decimal places
with ROUND_HALF_EVEN (ties go to the even digit, so 6.125 becomes 6.12 at two
places).
"""

from __future__ import annotations

import decimal
import logging
import typing as t

from quizgate.model import Attempt, GradeOverride, GradeRecord, GradingMethod

logger = logging.getLogger(__name__)

Rounding: t.Final[str] = decimal.ROUND_HALF_EVEN


def quantize(value: decimal.Decimal, decimal_points: int) -> decimal.Decimal:
    return value.quantize(decimal.Decimal(1).scaleb(-decimal_points), rounding=Rounding)


def _highest(scores: list[decimal.Decimal]) -> decimal.Decimal:
    return max(scores)


def _average(scores: list[decimal.Decimal]) -> decimal.Decimal:
    return sum(scores, decimal.Decimal(0)) / len(scores)


def _first(scores: list[decimal.Decimal]) -> decimal.Decimal:
    return scores[0]


def _last(scores: list[decimal.Decimal]) -> decimal.Decimal:
    return scores[-1]


AGGREGATORS: dict[GradingMethod, t.Callable[[list[decimal.Decimal]], decimal.Decimal]] = {
    GradingMethod.Highest: _highest,
    GradingMethod.Average: _average,
    GradingMethod.First: _first,
    GradingMethod.Last: _last,
}

GRADING_METHOD_NAMES: dict[GradingMethod, str] = {
    GradingMethod.Highest: "Highest grade",
    GradingMethod.Average: "Average grade",
    GradingMethod.First: "First attempt",
    GradingMethod.Last: "Last attempt",
}


def aggregate_scores(
    scores: t.Sequence[decimal.Decimal], method: GradingMethod, decimal_points: int = 2
) -> decimal.Decimal | None:
    """Combine scores, given in attempt order, under `method`."""
    if not scores:
        return None
    return quantize(AGGREGATORS[method](list(scores)), decimal_points)


def bound(value: decimal.Decimal, total_score: decimal.Decimal | None) -> decimal.Decimal:
    """Clamp `value` into 0..total_score; with no total only the floor applies."""
    clamped = max(value, decimal.Decimal(0))
    if total_score is not None:
        clamped = min(clamped, total_score)
    if clamped != value:
        logger.warning("grade out of range", extra={"value": value, "total_score": total_score})
    return clamped


def aggregate_grade(
    finished: t.Iterable[Attempt],
    method: GradingMethod,
    override: GradeOverride | None = None,
    *,
    decimal_points: int = 2,
    pass_threshold: decimal.Decimal | None = None,
    total_score: decimal.Decimal | None = None,
) -> GradeRecord:
    """Report the grade for `finished` attempts, or the override when it is authoritative.

    Attempt scores and override values are clamped into 0..`total_score` before they are combined.
    """
    feedback = override.feedback if override is not None else None

    if override is not None and override.is_overridden and override.value is not None:
        value: decimal.Decimal | None = quantize(bound(override.value, total_score), decimal_points)
        overridden = True
    else:
        # only finished attempts count, whatever the caller handed us
        scored = sorted((a for a in finished if a.is_finished and a.score is not None), key=lambda a: a.sequence)
        scores = [bound(t.cast(decimal.Decimal, a.score), total_score) for a in scored]
        value = aggregate_scores(scores, method, decimal_points)
        overridden = False

    passed = None
    if value is not None and pass_threshold is not None:
        passed = value >= pass_threshold

    return GradeRecord(value=value, overridden=overridden, feedback=feedback, passed=passed)
