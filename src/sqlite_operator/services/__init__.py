"""Reconciliation services for the sqlite operator."""

from . import cluster
from . import convergence
from . import defaults
from . import reconciler
from . import status

__all__ = ["cluster", "convergence", "defaults", "reconciler", "status"]
