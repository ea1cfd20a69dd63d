""" Reconcile a SqliteDatabase into its PVC, ConfigMaps, Deployment,
Service and Ingress.

Every step is idempotent and the status is recomputed from scratch, so a
reconcile that failed halfway is completed by simply running it again.
"""

import logging

from kubernetes.client.exceptions import ApiException

from sqlite_operator.config import get_cluster_domain
from sqlite_operator.exceptions import PreconditionError
from sqlite_operator.models.database import SqliteDatabaseStatus
from sqlite_operator.resources import (
    build_deployment,
    build_ingress,
    build_litestream_configmap,
    build_pvc,
    build_service,
    build_sqlite_rest_configmap,
    deployment_name,
)

from .convergence import ensure
from .defaults import apply_defaults, parse_spec
from .status import derive_failed_status, derive_status

logger = logging.getLogger(__name__)


def desired_objects(name, namespace, spec):
    """ Yield the owned objects for a defaulted spec, in apply order.

    Objects are built lazily, so a builder precondition failure only
    surfaces after every earlier object has been yielded.
    """
    yield build_pvc(name, namespace, spec)
    if spec.litestream_enabled:
        yield build_litestream_configmap(name, namespace, spec)
    if spec.sqlite_rest_enabled:
        yield build_sqlite_rest_configmap(name, namespace, spec)
    yield build_deployment(name, namespace, spec)
    if spec.sqlite_rest_enabled:
        yield build_service(name, namespace, spec)
    if spec.ingress_enabled:
        yield build_ingress(name, namespace, spec)


def observe_workload(cluster, name, namespace):
    """ Read the Deployment for status derivation.

    Returns:
        (deployment or None, lookup error or None)
    """
    try:
        return cluster.get("Deployment", deployment_name(name), namespace), None
    except ApiException as e:
        logger.warning(f"Failed to read Deployment {name} in {namespace}: {e}")
        return None, e


def reconcile_database(cluster, name, namespace, cluster_domain=None):
    """ Converge one SqliteDatabase.

    Args:
        cluster: ClusterClient
        name: SqliteDatabase name
        namespace: SqliteDatabase namespace
        cluster_domain: DNS suffix for endpoint URLs (defaults to config)

    Returns:
        The written SqliteDatabaseStatus, or None if the resource is gone

    Raises:
        PreconditionError: the spec cannot be reconciled as written
        ApiException: a Kubernetes API call failed
    """
    body = cluster.get_database(name, namespace)
    if body is None:
        logger.info(f"SqliteDatabase {namespace}/{name} not found, must have been deleted")
        return None

    cluster_domain = cluster_domain or get_cluster_domain()
    status = SqliteDatabaseStatus.model_validate(body.get("status") or {})

    try:
        generation = body["metadata"].get("generation")
        if generation is not None and status.observedGeneration != generation:
            status.observedGeneration = generation
            body = cluster.update_database_status(body, status.to_dict())

        spec = apply_defaults(parse_spec(body.get("spec")))

        for desired in desired_objects(name, namespace, spec):
            ensure(cluster, desired, body)

    except PreconditionError as e:
        logger.error(f"SqliteDatabase {namespace}/{name} cannot be reconciled: {e}")
        status = derive_failed_status(status, str(e))
        cluster.update_database_status(body, status.to_dict())
        raise

    deployment, lookup_error = observe_workload(cluster, name, namespace)
    status = derive_status(
        name,
        namespace,
        spec,
        previous=status,
        deployment=deployment,
        lookup_error=lookup_error,
        cluster_domain=cluster_domain,
    )
    cluster.update_database_status(body, status.to_dict())
    logger.debug(f"SqliteDatabase {namespace}/{name} is {status.phase}: {status.message}")
    return status
