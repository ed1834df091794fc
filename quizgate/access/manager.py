from __future__ import annotations

import typing as t

from quizgate.model import AccessContext, Assessment, Attempt

from .rule import Rule, RuleKind, RULES


class AccessManager(object):
    """The admission rules that apply to one user, one assessment, at one instant.

    Answers are pure functions of the assessment, the access context and the
    attempt counts passed in; the manager never reads attempt records itself.
    """

    assessment: Assessment
    context: AccessContext
    rules: tuple[Rule, ...]

    def __init__(self, assessment: Assessment, context: AccessContext, rule_types: t.Sequence[type[Rule]] = RULES):
        self.assessment = assessment
        self.context = context
        self.rules = tuple(r for r in (rt.make(assessment, context) for rt in rule_types) if r is not None)

    def rule(self, kind: RuleKind) -> Rule | None:
        return next((r for r in self.rules if r.kind is kind), None)

    def describe_rules(self) -> list[str]:
        return [d for d in (r.describe() for r in self.rules) if d is not None]

    def is_finished(self, attempt_count: int, last_finished: Attempt | None) -> bool:
        """Whether the attempt limit alone rules out another attempt.

        Deliberately narrower than `prevent_new_attempt`: a user who is only
        waiting out a delay, or outside the open window, is not finished.
        """
        counter = self.rule(RuleKind.NumAttempts)
        if counter is None:
            return False
        return bool(counter.prevent_new_attempt(attempt_count, last_finished))

    def prevent_new_attempt(self, attempt_count: int, last_finished: Attempt | None) -> list[str]:
        return [msg for r in self.rules for msg in r.prevent_new_attempt(attempt_count, last_finished)]

    def prevent_access(self) -> list[str]:
        return [msg for r in self.rules for msg in r.prevent_access()]
