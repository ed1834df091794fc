__all__ = [
    # Base
    "BaseModel",
    "FrozenModel",
    "WithCtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    # ID Types
    "ShortUUIDKey",
    "UserID",
    "AssessmentID",
    "AttemptID",
    "AccessOverrideID",
    "GradeOverrideID",
    "AuditEventID",
    # Assessments
    "Assessment",
    "AccessOverride",
    "GradingMethod",
    # Attempts
    "Attempt",
    "AttemptState",
    # Overrides
    "GradeOverride",
    # Admission
    "AccessContext",
    "AdmissionAction",
    "AdmissionResult",
    "Capabilities",
    "GradeRecord",
    # Audit
    "AuditEvent",
    "ViewCompletion",
]

from .admission import AccessContext, AdmissionAction, AdmissionResult, Capabilities, GradeRecord
from .assessment import AccessOverride, Assessment, GradingMethod
from .attempt import Attempt, AttemptState
from .audit import AuditEvent, ViewCompletion
from .base import BaseModel, FrozenModel, WithCtime, WithTimestamps
from .enum import DeploymentEnvironment
from .id import AccessOverrideID, AssessmentID, AttemptID, AuditEventID, GradeOverrideID, ShortUUIDKey, UserID
from .override import GradeOverride
