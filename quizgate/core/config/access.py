import typing as t

from .base import BaseSettings


class AccessSettings(BaseSettings):
    # what to do when a user has more than one attempt in progress
    invariant_policy: t.Literal["warn", "raise"] = "warn"
    # record "view" events in the audit log
    audit: bool = True
    mark_viewed: bool = True
