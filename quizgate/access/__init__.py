__all__ = [
    # Errors
    "AccessError",
    "ConfigurationError",
    "DataUnavailable",
    "InvariantViolation",
    # Rules
    "Rule",
    "RuleKind",
    "RULES",
    "AccessManager",
    # Attempts & grades
    "AttemptHistory",
    "resolve_history",
    "aggregate_grade",
    # Admission
    "Decision",
    "decide",
    "describe",
    "evaluate",
    "merge_overrides",
]

from .decision import decide, Decision, describe, evaluate
from .effective import merge_overrides
from .errors import AccessError, ConfigurationError, DataUnavailable, InvariantViolation
from .grading import aggregate_grade
from .history import AttemptHistory, resolve_history
from .manager import AccessManager
from .rule import Rule, RuleKind, RULES
