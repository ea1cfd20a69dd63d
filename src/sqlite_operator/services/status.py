""" Status derivation for SqliteDatabase resources.

Status is recomputed from scratch on every reconcile from the spec and the
observed Deployment; only the condition timestamps and the observed
generation carry over from the previous status.
"""

import datetime

from sqlite_operator.config import DEFAULT_CLUSTER_DOMAIN
from sqlite_operator.crd.base import CRDCondition
from sqlite_operator.models.database import (
    PHASE_FAILED,
    PHASE_PENDING,
    PHASE_RUNNING,
    EndpointsStatus,
    SqliteDatabaseStatus,
)
from sqlite_operator.resources.common import service_name

READY_CONDITION = "Ready"
REASON_SUCCEEDED = "ReconciliationSucceeded"
REASON_IN_PROGRESS = "ReconciliationInProgress"
REASON_INVALID_SPEC = "InvalidSpec"

MESSAGE_NOT_FOUND = "workload not found"
MESSAGE_RUNNING = "running successfully"
MESSAGE_STARTING = "starting"


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)


def endpoint_url(name, namespace, port, cluster_domain=DEFAULT_CLUSTER_DOMAIN):
    return f"http://{service_name(name)}.{namespace}.{cluster_domain}:{port}"


def ready_replicas(deployment):
    return (deployment.get("status") or {}).get("readyReplicas") or 0


def upsert_ready_condition(status, ready, reason, message, now):
    """ Replace the Ready condition, keeping its timestamp unless it flipped.
    """
    condition_status = "True" if ready else "False"
    transition_time = now

    previous = status.get_condition(READY_CONDITION)
    if previous is not None and previous.status == condition_status:
        transition_time = previous.lastTransitionTime or now

    status.set_condition(
        CRDCondition(
            type=READY_CONDITION,
            status=condition_status,
            reason=reason,
            message=message,
            lastTransitionTime=transition_time,
        )
    )


def derive_status(
    name,
    namespace,
    spec,
    previous=None,
    deployment=None,
    lookup_error=None,
    now=None,
    cluster_domain=DEFAULT_CLUSTER_DOMAIN,
):
    """ Compute the status of a SqliteDatabase.

    Args:
        name: SqliteDatabase name
        namespace: SqliteDatabase namespace
        spec: Defaulted SqliteDatabaseSpec
        previous: Current SqliteDatabaseStatus, if any
        deployment: Live Deployment dict, None if it was not found
        lookup_error: Exception raised while reading the Deployment
        now: Timestamp for condition transitions (defaults to current UTC)
        cluster_domain: DNS suffix for endpoint URLs

    Returns:
        A new SqliteDatabaseStatus
    """
    now = now or utcnow()
    status = (previous or SqliteDatabaseStatus()).model_copy(deep=True)
    status.endpoints = None
    status.replicas = 0

    if lookup_error is not None:
        status.phase = PHASE_FAILED
        status.message = f"failed to get workload: {lookup_error}"
    elif deployment is None:
        status.phase = PHASE_PENDING
        status.message = MESSAGE_NOT_FOUND
    elif ready_replicas(deployment) > 0:
        status.phase = PHASE_RUNNING
        status.message = MESSAGE_RUNNING
        status.replicas = ready_replicas(deployment)

        if spec.sqlite_rest_enabled:
            status.endpoints = EndpointsStatus(
                rest=endpoint_url(name, namespace, spec.sqliteRest.port, cluster_domain)
            )
            if spec.metrics_enabled:
                status.endpoints.metrics = endpoint_url(
                    name, namespace, spec.sqliteRest.metrics.port, cluster_domain
                )
    else:
        status.phase = PHASE_PENDING
        status.message = MESSAGE_STARTING

    running = status.phase == PHASE_RUNNING
    upsert_ready_condition(
        status,
        ready=running,
        reason=REASON_SUCCEEDED if running else REASON_IN_PROGRESS,
        message=status.message,
        now=now,
    )
    return status


def derive_failed_status(previous, message, now=None):
    """ Status for a spec that cannot be reconciled until it is edited.
    """
    now = now or utcnow()
    status = (previous or SqliteDatabaseStatus()).model_copy(deep=True)
    status.endpoints = None
    status.replicas = 0
    status.phase = PHASE_FAILED
    status.message = message
    upsert_ready_condition(
        status, ready=False, reason=REASON_INVALID_SPEC, message=message, now=now
    )
    return status
