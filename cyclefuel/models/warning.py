"""
Edge case warning model.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class WarningSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    HEALTH_NOTE = "HEALTH_NOTE"


class SuggestedAction(BaseModel):
    text: str
    link: str


class EdgeCaseWarning(BaseModel):
    """A user-facing notice that qualifies recommendations."""
    severity: WarningSeverity
    message: str
    action: Optional[SuggestedAction] = None
