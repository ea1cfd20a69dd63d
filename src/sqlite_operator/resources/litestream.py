""" Litestream replication config builder.

The generated ``litestream.yml`` lists one ``dbs`` entry per replica, all
pointing at the same database file.
"""

import logging

import yaml

from .common import database_path, litestream_config_name, object_meta

logger = logging.getLogger(__name__)

CONFIG_KEY = "litestream.yml"
LOCAL_BACKUP_ROOT = "/backups"

# Backend type -> replica URL template
REPLICA_URL_TEMPLATES = {
    "s3": "s3://{bucket}/{path}",
    "azure": "abs://{bucket}/{path}",
    "gcs": "gs://{bucket}/{path}",
    "local": "file://" + LOCAL_BACKUP_ROOT + "/{path}",
}
DEFAULT_BACKEND = "s3"

# Optional replica fields forwarded verbatim, spec field -> litestream key
OPTIONAL_REPLICA_FIELDS = (
    ("region", "region"),
    ("retention", "retention"),
    ("retentionCheckInterval", "retention-check-interval"),
    ("endpoint", "endpoint"),
)


def build_replica_url(replica):
    """ Build the litestream replica URL for a replica entry.

    Unknown backend types are treated as s3.
    """
    template = REPLICA_URL_TEMPLATES.get(
        replica.type, REPLICA_URL_TEMPLATES[DEFAULT_BACKEND]
    )
    return template.format(bucket=replica.bucket, path=replica.path or "")


def build_replica_entry(spec, replica):
    entry = {"url": build_replica_url(replica)}
    for field, key in OPTIONAL_REPLICA_FIELDS:
        value = getattr(replica, field)
        if value is not None:
            entry[key] = value
    return {"path": database_path(spec), "replica": entry}


def build_fallback_config(spec):
    """ Minimal hand-built document covering only the first replica.
    """
    replicas = spec.litestream.replicas
    if not replicas:
        return "dbs: []\n"
    return (
        "dbs:\n"
        f"  - path: {database_path(spec)}\n"
        "    replica:\n"
        f"      url: {build_replica_url(replicas[0])}\n"
    )


def build_litestream_config(spec):
    """ Render litestream.yml for a defaulted spec.

    A YAML encoding failure degrades to the single-replica fallback
    document instead of failing the reconcile.
    """
    config = {
        "dbs": [build_replica_entry(spec, replica) for replica in spec.litestream.replicas]
    }
    try:
        return yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
    except yaml.YAMLError as e:
        logger.warning(f"Could not encode litestream config, using fallback: {e}")
        return build_fallback_config(spec)


def build_litestream_configmap(name, namespace, spec):
    """ Build the ConfigMap mounted into the litestream sidecar.

    Args:
        name: SqliteDatabase name
        namespace: SqliteDatabase namespace
        spec: Defaulted SqliteDatabaseSpec
    """
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": object_meta(litestream_config_name(name), namespace, name),
        "data": {CONFIG_KEY: build_litestream_config(spec)},
    }
