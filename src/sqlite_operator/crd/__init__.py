"""CRD model infrastructure for the sqlite operator."""

from .base import CRDCondition, CRDSpec, CRDStatus

__all__ = ["CRDCondition", "CRDSpec", "CRDStatus"]
