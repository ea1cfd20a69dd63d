"""Builders for the Kubernetes objects owned by a SqliteDatabase.

Every builder is a pure function of the defaulted spec and returns a plain
manifest dict.
"""

from .common import (
    deployment_name,
    ingress_name,
    litestream_config_name,
    pvc_name,
    service_name,
    sqlite_rest_config_name,
)
from .litestream import build_litestream_configmap
from .network import build_ingress, build_service
from .sqlite_rest import build_sqlite_rest_configmap
from .storage import build_pvc
from .workload import build_deployment

__all__ = [
    "build_deployment",
    "build_ingress",
    "build_litestream_configmap",
    "build_pvc",
    "build_service",
    "build_sqlite_rest_configmap",
    "deployment_name",
    "ingress_name",
    "litestream_config_name",
    "pvc_name",
    "service_name",
    "sqlite_rest_config_name",
]
