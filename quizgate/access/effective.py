from __future__ import annotations

import typing as t

from quizgate.model import AccessOverride, Assessment


def merge_overrides(assessment: Assessment, *overrides: AccessOverride | None) -> Assessment:
    """Return the assessment as one user sees it after their access overrides.

    Overrides are applied in the order given; later ones win field by field.
    The base assessment is left untouched.
    """
    changes: dict[str, t.Any] = {}
    for override in overrides:
        if override is None:
            continue
        if override.assessment_id != assessment.assessment_id:
            raise ValueError(
                f"override {override.override_id} is for {override.assessment_id}, not {assessment.assessment_id}"
            )
        changes.update(override.changes)
    if not changes:
        return assessment
    return assessment.model_copy(update=changes)
