"""Admission rules.

Each rule is one independent piece of access policy. A rule can describe
itself to the user and veto two things: starting a new attempt, and any
access at all (which also covers continuing an attempt that is already
in progress). An empty list from a veto check means the rule has no
objection.

The set of rule kinds is closed. `RULES` lists them in the order their
descriptions and messages are presented, and `AccessManager` builds its
rules from it.
"""

from __future__ import annotations

import abc
import datetime
import enum
import hmac
import ipaddress
import typing as t

from quizgate.model import AccessContext, Assessment, Attempt

from .errors import ConfigurationError


class RuleKind(enum.Enum):
    NumAttempts = "num_attempts"
    OpenCloseDate = "open_close_date"
    TimeLimit = "time_limit"
    InterAttemptDelay = "inter_attempt_delay"
    Password = "password"
    Subnet = "subnet"
    SafeBrowser = "safe_browser"
    Prerequisite = "prerequisite"


def format_time(when: datetime.datetime) -> str:
    return f"{when:%A}, {when.day} {when:%B %Y, %H:%M}"


def format_duration(span: datetime.timedelta) -> str:
    total = int(span.total_seconds())
    parts: list[str] = []
    for size, unit in ((86400, "day"), (3600, "hour"), (60, "min"), (1, "sec")):
        n, total = divmod(total, size)
        if n:
            parts.append(f"{n} {unit}{'s' if n != 1 else ''}")
    return " ".join(parts) or "0 secs"


class Rule(abc.ABC):
    kind: t.ClassVar[RuleKind]

    def __init__(self, assessment: Assessment, context: AccessContext):
        self.assessment = assessment
        self.context = context

    @classmethod
    @abc.abstractmethod
    def make(cls, assessment: Assessment, context: AccessContext) -> Rule | None:
        """Build the rule, or return None if the assessment's settings leave it nothing to check.

        Raises ConfigurationError for settings the rule cannot work with.
        """
        ...

    def describe(self) -> str | None:
        return None

    def prevent_new_attempt(self, attempt_count: int, last_finished: Attempt | None) -> list[str]:
        return []

    def prevent_access(self) -> list[str]:
        return []

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.assessment.assessment_id!s}>"


class NumAttemptsRule(Rule):
    kind = RuleKind.NumAttempts

    @classmethod
    def make(cls, assessment: Assessment, context: AccessContext) -> Rule | None:
        if assessment.max_attempts < 0:
            raise ConfigurationError(assessment.assessment_id, f"attempt limit {assessment.max_attempts} is negative")
        if assessment.max_attempts == 0:
            return None
        return cls(assessment, context)

    def describe(self) -> str | None:
        return f"Attempts allowed: {self.assessment.max_attempts}"

    def prevent_new_attempt(self, attempt_count: int, last_finished: Attempt | None) -> list[str]:
        if attempt_count >= self.assessment.max_attempts:
            return ["No more attempts are allowed."]
        return []


class OpenCloseDateRule(Rule):
    kind = RuleKind.OpenCloseDate

    @classmethod
    def make(cls, assessment: Assessment, context: AccessContext) -> Rule | None:
        opens, closes = assessment.open_time, assessment.close_time
        if opens is None and closes is None:
            return None
        if opens is not None and closes is not None and closes < opens:
            raise ConfigurationError(assessment.assessment_id, "close time is before open time")
        return cls(assessment, context)

    def describe(self) -> str | None:
        now = self.context.now
        opens, closes = self.assessment.open_time, self.assessment.close_time
        if opens is not None and now < opens:
            return f"This assessment will not be available until {format_time(opens)}."
        if closes is not None and now > closes:
            return f"This assessment closed on {format_time(closes)}."
        if opens is not None and closes is not None:
            return f"This assessment opened on {format_time(opens)} and will close on {format_time(closes)}."
        if opens is not None:
            return f"This assessment opened on {format_time(opens)}."
        return f"This assessment will close on {format_time(t.cast(datetime.datetime, closes))}."

    def prevent_access(self) -> list[str]:
        now = self.context.now
        opens, closes = self.assessment.open_time, self.assessment.close_time
        if opens is not None and now < opens:
            return [f"This assessment is not available until {format_time(opens)}."]
        if closes is not None and now > closes:
            return [f"This assessment closed on {format_time(closes)}."]
        return []


class TimeLimitRule(Rule):
    kind = RuleKind.TimeLimit

    @classmethod
    def make(cls, assessment: Assessment, context: AccessContext) -> Rule | None:
        limit = assessment.time_limit
        if limit is not None and limit < datetime.timedelta(0):
            raise ConfigurationError(assessment.assessment_id, "time limit is negative")
        if not limit or context.ignore_time_limits:
            return None
        return cls(assessment, context)

    def describe(self) -> str | None:
        limit = t.cast(datetime.timedelta, self.assessment.time_limit)
        return f"Time limit: {format_duration(limit)}"


class InterAttemptDelayRule(Rule):
    """Enforce a cooling-off period after the first, and after later, finished attempts."""

    kind = RuleKind.InterAttemptDelay

    @classmethod
    def make(cls, assessment: Assessment, context: AccessContext) -> Rule | None:
        delays = (assessment.attempt_delay, assessment.attempt_delay_after_second)
        if any(d is not None and d < datetime.timedelta(0) for d in delays):
            raise ConfigurationError(assessment.assessment_id, "delay between attempts is negative")
        if assessment.max_attempts == 1 or not any(delays):
            return None
        return cls(assessment, context)

    def delay_for(self, attempt_count: int) -> datetime.timedelta | None:
        if attempt_count == 1:
            return self.assessment.attempt_delay
        if attempt_count > 1:
            return self.assessment.attempt_delay_after_second
        return None

    def prevent_new_attempt(self, attempt_count: int, last_finished: Attempt | None) -> list[str]:
        delay = self.delay_for(attempt_count)
        if not delay or last_finished is None or last_finished.finish_time is None:
            return []

        next_start = last_finished.finish_time + delay
        if self.context.now >= next_start:
            return []
        closes = self.assessment.close_time
        if closes is not None and next_start > closes:
            return ["No more attempts are allowed."]
        return [
            "You must wait before you may re-attempt. "
            f"You may start another attempt after {format_time(next_start)}."
        ]


class PasswordRule(Rule):
    kind = RuleKind.Password

    @classmethod
    def make(cls, assessment: Assessment, context: AccessContext) -> Rule | None:
        return cls(assessment, context) if assessment.password else None

    def describe(self) -> str | None:
        return "This assessment requires a password to start."

    def prevent_access(self) -> list[str]:
        expected = t.cast(str, self.assessment.password)
        supplied = self.context.password or ""
        if hmac.compare_digest(supplied.encode("utf8"), expected.encode("utf8")):
            return []
        return ["You need to supply the assessment password."]


class SubnetRule(Rule):
    kind = RuleKind.Subnet

    def __init__(self, assessment: Assessment, context: AccessContext):
        super().__init__(assessment, context)
        try:
            self.networks = tuple(ipaddress.ip_network(s.strip(), strict=False) for s in assessment.subnets)
        except ValueError as ex:
            raise ConfigurationError(assessment.assessment_id, f"invalid subnet: {ex}") from ex

    @classmethod
    def make(cls, assessment: Assessment, context: AccessContext) -> Rule | None:
        return cls(assessment, context) if assessment.subnets else None

    def allows(self, address: str | None) -> bool:
        if not address:
            return False
        try:
            ip = ipaddress.ip_address(address)
        except ValueError:
            return False
        return any(ip in net for net in self.networks if net.version == ip.version)

    def prevent_access(self) -> list[str]:
        if self.allows(self.context.client_address):
            return []
        return [
            "This assessment is only accessible from certain networks, "
            "and this computer is not on the allowed list."
        ]


class SafeBrowserRule(Rule):
    kind = RuleKind.SafeBrowser

    @classmethod
    def make(cls, assessment: Assessment, context: AccessContext) -> Rule | None:
        return cls(assessment, context) if assessment.require_safe_browser else None

    def describe(self) -> str | None:
        return "This assessment must be attempted using a secure browser."

    def prevent_access(self) -> list[str]:
        if self.context.safe_browser:
            return []
        return ["This assessment may only be attempted using a secure browser."]


class PrerequisiteRule(Rule):
    kind = RuleKind.Prerequisite

    @classmethod
    def make(cls, assessment: Assessment, context: AccessContext) -> Rule | None:
        if assessment.assessment_id in assessment.prerequisites:
            raise ConfigurationError(assessment.assessment_id, "assessment lists itself as a prerequisite")
        return cls(assessment, context) if assessment.prerequisites else None

    @property
    def outstanding(self) -> tuple[str, ...]:
        return tuple(p for p in self.assessment.prerequisites if p not in self.context.completed)

    def describe(self) -> str | None:
        n = len(self.assessment.prerequisites)
        return f"This assessment requires completing {n} other assessment{'s' if n != 1 else ''} first."

    def prevent_access(self) -> list[str]:
        n = len(self.outstanding)
        if not n:
            return []
        return [f"You must first complete {n} prerequisite assessment{'s' if n != 1 else ''}."]


RULES: tuple[type[Rule], ...] = (
    NumAttemptsRule,
    OpenCloseDateRule,
    TimeLimitRule,
    InterAttemptDelayRule,
    PasswordRule,
    SubnetRule,
    SafeBrowserRule,
    PrerequisiteRule,
)
