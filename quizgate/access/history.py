from __future__ import annotations

import logging
import typing as t

from quizgate.model import Attempt, AttemptState, FrozenModel

from .errors import InvariantViolation

logger = logging.getLogger(__name__)

InvariantPolicy = t.Literal["warn", "raise"]


class AttemptHistory(FrozenModel):
    finished: tuple[Attempt, ...] = ()
    unfinished: Attempt | None = None
    warnings: tuple[str, ...] = ()

    @property
    def attempt_count(self) -> int:
        # an attempt in progress uses up one of the allowance
        return len(self.finished) + (1 if self.unfinished is not None else 0)

    @property
    def last_finished(self) -> Attempt | None:
        return self.finished[-1] if self.finished else None

    @property
    def has_unfinished(self) -> bool:
        return self.unfinished is not None


def resolve_history(attempts: t.Iterable[Attempt], policy: InvariantPolicy = "warn") -> AttemptHistory:
    """Sort one user's attempts into finished ones and the attempt in progress.

    Abandoned attempts are dropped. If more than one attempt is in progress,
    the earliest by sequence number is used and the violation is logged and
    reported in `warnings`, unless `policy` is "raise".
    """
    ordered = sorted(attempts, key=lambda a: a.sequence)
    finished = tuple(a for a in ordered if a.state == AttemptState.Finished)
    in_progress = [a for a in ordered if a.state == AttemptState.InProgress]

    warnings: list[str] = []
    if len(in_progress) > 1:
        first = in_progress[0]
        violation = InvariantViolation(first.assessment_id, first.user_id, tuple(a.attempt_id for a in in_progress))
        if policy == "raise":
            raise violation
        logger.warning(
            "multiple in-progress attempts, using the earliest",
            extra={
                "assessment_id": str(first.assessment_id),
                "user_id": str(first.user_id),
                "attempt_ids": [str(a.attempt_id) for a in in_progress],
            },
        )
        warnings.append(str(violation))

    return AttemptHistory(
        finished=finished,
        unfinished=in_progress[0] if in_progress else None,
        warnings=tuple(warnings),
    )
