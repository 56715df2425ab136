"""
Datatypes describing what the enforcement pipeline did with a message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from modguard.detection.classifier import ClassificationResult


class EnforcementAction(Enum):
    """The pipeline steps, in execution order."""

    DELETE = "delete"
    WARNING = "warning"
    TIMEOUT = "timeout"
    LOG_POST = "log_post"
    DM_NOTIFY = "dm_notify"

    def __str__(self) -> str:
        return self.value


class ModerationState(Enum):
    """Lifecycle of one evaluated message."""

    RECEIVED = "received"
    EVALUATED = "evaluated"
    CLEAN = "clean"
    FLAGGED = "flagged"
    ENFORCED = "enforced"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class EnforcementOutcome:
    """Result of one pipeline step.

    ``skipped`` marks a step that deliberately did nothing (missing timeout
    permission, no log channel). A skipped step is neither a success nor an
    error.
    """

    action: EnforcementAction
    succeeded: bool
    skipped: bool = False
    error_detail: Optional[str] = None

    @classmethod
    def success(cls, action: EnforcementAction) -> "EnforcementOutcome":
        return cls(action=action, succeeded=True)

    @classmethod
    def failure(cls, action: EnforcementAction, detail: str) -> "EnforcementOutcome":
        return cls(action=action, succeeded=False, error_detail=detail)

    @classmethod
    def skip(cls, action: EnforcementAction, detail: str | None = None) -> "EnforcementOutcome":
        return cls(action=action, succeeded=False, skipped=True, error_detail=detail)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "error_detail": self.error_detail,
        }


@dataclass(slots=True)
class EnforcementReport:
    """Everything the host needs to audit one evaluated message."""

    state: ModerationState
    classification: ClassificationResult
    outcomes: List[EnforcementOutcome] = field(default_factory=list)

    @property
    def flagged(self) -> bool:
        return self.state in (ModerationState.FLAGGED, ModerationState.ENFORCED)
