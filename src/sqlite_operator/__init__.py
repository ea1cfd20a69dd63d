"""SQLite operator: runs SqliteDatabase resources as Kubernetes workloads."""

__version__ = "0.1.0"
