"""Base classes for CRD specifications."""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class CRDCondition(BaseModel):
    """Custom Kubernetes condition."""

    type: str
    status: str  # True, False, Unknown
    reason: str
    message: str
    lastTransitionTime: Optional[datetime] = None


class CRDStatus(BaseModel):
    """Base class for all CRD status objects."""

    phase: Optional[str] = None
    conditions: List[CRDCondition] = Field(default_factory=list)
    observedGeneration: Optional[int] = None

    class Config:
        extra = "allow"

    def get_condition(self, condition_type):
        """Return the condition with the given type, if any."""
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None

    def set_condition(self, condition):
        """Replace the condition of the same type in place, or append it."""
        for index, existing in enumerate(self.conditions):
            if existing.type == condition.type:
                self.conditions[index] = condition
                return
        self.conditions.append(condition)


class CRDSpec(BaseModel):
    """Base class for all CRD spec objects."""

    class Config:
        extra = "forbid"
        validate_assignment = True
