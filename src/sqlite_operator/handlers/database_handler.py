"""Kopf handlers for SqliteDatabase custom resources.

Create, update and resume events as well as a periodic timer all run the
same level-triggered reconcile; deletion is left to the garbage collector
through owner references.
"""

import logging

import kopf
from kubernetes.client.exceptions import ApiException

from sqlite_operator.config import get_resync_interval, get_retry_delay
from sqlite_operator.exceptions import PreconditionError
from sqlite_operator.models.database import GROUP, PLURAL, VERSION
from sqlite_operator.services.cluster import ClusterClient
from sqlite_operator.services.reconciler import reconcile_database

logger = logging.getLogger(__name__)


def run_reconcile(name, namespace, body):
    """ Reconcile one SqliteDatabase and translate failures for kopf.

    Raises:
        kopf.PermanentError: the spec must be edited before retrying
        kopf.TemporaryError: the Kubernetes API failed, retry later
    """
    cluster = ClusterClient()
    try:
        status = reconcile_database(cluster, name, namespace)
    except PreconditionError as e:
        kopf.warn(body, reason="InvalidSpec", message=str(e))
        raise kopf.PermanentError(str(e)) from e
    except ApiException as e:
        logger.error(f"Kubernetes API error reconciling {namespace}/{name}: {e}")
        raise kopf.TemporaryError(
            f"Kubernetes API error: {e.status} {e.reason}", delay=get_retry_delay()
        ) from e

    if status is not None:
        logger.info(f"Reconciled SqliteDatabase {namespace}/{name}: {status.phase}")
    return status


@kopf.on.resume(GROUP, VERSION, PLURAL, id="reconcile-on-resume")
@kopf.on.create(GROUP, VERSION, PLURAL, id="reconcile-on-create")
@kopf.on.update(GROUP, VERSION, PLURAL, id="reconcile-on-update")
def reconcile_sqlite_database(name, namespace, body, **kwargs):
    """Reconcile whenever the spec changes or the operator restarts."""
    run_reconcile(name, namespace, body)


@kopf.timer(
    GROUP,
    VERSION,
    PLURAL,
    interval=get_resync_interval(),
    initial_delay=get_resync_interval(),
    id="resync",
)
def resync_sqlite_database(name, namespace, body, **kwargs):
    """Periodic resync so drift is repaired without spec changes."""
    run_reconcile(name, namespace, body)
