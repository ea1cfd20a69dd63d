"""Operator settings read from the environment."""

import os

DEFAULT_CLUSTER_DOMAIN = "svc.cluster.local"


def get_env_int(key, default):
    """Read an integer environment variable, falling back to ``default``."""
    value = os.getenv(key, "")
    return int(value) if value else default


def get_env_bool(key, default):
    value = os.getenv(key, "")
    if not value:
        return default
    return value.lower() in ("true", "1", "yes")


def get_log_level():
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_cluster_domain():
    """DNS suffix used when publishing in-cluster endpoint URLs."""
    return os.getenv("CLUSTER_DOMAIN", DEFAULT_CLUSTER_DOMAIN)


def get_resync_interval():
    """Seconds between periodic reconciles of every SqliteDatabase."""
    return float(get_env_int("RESYNC_INTERVAL", 60))


def get_retry_delay():
    """Seconds kopf waits before retrying after a transient API error."""
    return get_env_int("RETRY_DELAY", 30)


def get_watch_namespace():
    """Namespace to watch, or None to watch the whole cluster."""
    return os.getenv("WATCH_NAMESPACE") or None


def get_operator_settings():
    """Collect the kopf runtime settings.

    Returns:
        dict with worker limit, posting flag and watch server timeout
    """
    return {
        "worker_limit": get_env_int("WORKER_LIMIT", 5),
        "posting_enabled": get_env_bool("POSTING_ENABLED", True),
        "server_timeout": get_env_int("SERVER_TIMEOUT", 60),
    }
