"""Handler modules for the sqlite operator."""

# Importing a handler module registers its kopf handlers
from . import database_handler

__all__ = ["database_handler"]
