""" Deployment builder for the database pod.

The pod runs an init container that creates the database file and up to
two sidecars sharing the database volume: litestream for replication and
sqlite-rest for HTTP access.
"""

from .common import (
    DB_MOUNT_PATH,
    DB_STORAGE_VOLUME,
    database_path,
    deployment_name,
    litestream_config_name,
    object_meta,
    pvc_name,
    selector_labels,
    sqlite_rest_config_name,
)
from .litestream import CONFIG_KEY as LITESTREAM_CONFIG_KEY
from .sqlite_rest import AUTH_MOUNT_PATH, AUTH_TOKEN_FILE
from .templates import render_template

SQLITE_IMAGE = "keinos/sqlite3:latest"
LITESTREAM_IMAGE = "litestream/litestream:latest"
SQLITE_REST_IMAGE = "ghcr.io/b4fun/sqlite-rest/server:main"

INIT_SCRIPT_VOLUME = "init-script"
INIT_SCRIPT_MOUNT_PATH = "/init"
INIT_SQL_FILE = f"{INIT_SCRIPT_MOUNT_PATH}/init.sql"

LITESTREAM_CONFIG_VOLUME = "litestream-config"
LITESTREAM_CONFIG_MOUNT_PATH = "/etc/litestream"
SQLITE_REST_CONFIG_VOLUME = "sqlite-rest-config"
SQLITE_REST_AUTH_VOLUME = "sqlite-rest-auth"

DEFAULT_ACCESS_KEY_FIELD = "access-key"
DEFAULT_SECRET_KEY_FIELD = "secret-key"


def db_volume_mount():
    return {"name": DB_STORAGE_VOLUME, "mountPath": DB_MOUNT_PATH}


def build_init_script(spec):
    """ Shell script that creates the database file if it is missing.
    """
    init_sql = INIT_SQL_FILE if spec.database.initScript is not None else None
    return render_template(
        "init-db.sh.j2",
        mount_path=DB_MOUNT_PATH,
        db_path=database_path(spec),
        init_sql=init_sql,
    )


def build_init_containers(spec):
    volume_mounts = [db_volume_mount()]
    if spec.database.initScript is not None:
        volume_mounts.append(
            {"name": INIT_SCRIPT_VOLUME, "mountPath": INIT_SCRIPT_MOUNT_PATH}
        )

    return [
        {
            "name": "init-db",
            "image": SQLITE_IMAGE,
            "command": ["/bin/sh", "-c"],
            "args": [build_init_script(spec)],
            "volumeMounts": volume_mounts,
        }
    ]


def secret_env(env_name, secret_name, key):
    return {
        "name": env_name,
        "valueFrom": {"secretKeyRef": {"name": secret_name, "key": key}},
    }


def build_litestream_env(spec):
    """ Credential env vars, two per replica that references a Secret.
    """
    env = []
    for replica in spec.litestream.replicas:
        credentials = replica.credentials
        if credentials is None:
            continue
        env.append(
            secret_env(
                "LITESTREAM_ACCESS_KEY_ID",
                credentials.secretName,
                credentials.accessKeyField or DEFAULT_ACCESS_KEY_FIELD,
            )
        )
        env.append(
            secret_env(
                "LITESTREAM_SECRET_ACCESS_KEY",
                credentials.secretName,
                credentials.secretKeyField or DEFAULT_SECRET_KEY_FIELD,
            )
        )
    return env


def build_litestream_container(spec):
    container = {
        "name": "litestream",
        "image": LITESTREAM_IMAGE,
        "command": ["litestream"],
        "args": [
            "replicate",
            "-config",
            f"{LITESTREAM_CONFIG_MOUNT_PATH}/{LITESTREAM_CONFIG_KEY}",
        ],
        "volumeMounts": [
            db_volume_mount(),
            {
                "name": LITESTREAM_CONFIG_VOLUME,
                "mountPath": LITESTREAM_CONFIG_MOUNT_PATH,
            },
        ],
    }
    env = build_litestream_env(spec)
    if env:
        container["env"] = env
    return container


def build_sqlite_rest_args(spec):
    rest = spec.sqliteRest
    args = [
        "serve",
        "--db-dsn",
        database_path(spec),
        "--http-addr",
        f":{rest.port}",
    ]

    if spec.metrics_enabled:
        args.extend(["--metrics-addr", f":{rest.metrics.port}"])

    for table in rest.allowedTables:
        args.extend(["--security-allow-table", table])

    if rest.authSecret is not None:
        args.extend(["--auth-token-file", AUTH_TOKEN_FILE])

    return args


def build_sqlite_rest_ports(spec):
    ports = [{"name": "http", "containerPort": spec.sqliteRest.port}]
    if spec.metrics_enabled:
        ports.append({"name": "metrics", "containerPort": spec.sqliteRest.metrics.port})
    return ports


def build_sqlite_rest_container(spec):
    volume_mounts = [db_volume_mount()]
    if spec.sqliteRest.authSecret is not None:
        volume_mounts.append(
            {
                "name": SQLITE_REST_AUTH_VOLUME,
                "mountPath": AUTH_MOUNT_PATH,
                "readOnly": True,
            }
        )

    return {
        "name": "sqlite-rest",
        "image": SQLITE_REST_IMAGE,
        "args": build_sqlite_rest_args(spec),
        "ports": build_sqlite_rest_ports(spec),
        "volumeMounts": volume_mounts,
    }


def build_containers(spec):
    """ Sidecar list, one entry per enabled feature.
    """
    containers = []
    if spec.litestream_enabled:
        containers.append(build_litestream_container(spec))
    if spec.sqlite_rest_enabled:
        containers.append(build_sqlite_rest_container(spec))

    if spec.resources:
        for container in containers:
            container["resources"] = dict(spec.resources)

    return containers


def configmap_volume(volume_name, configmap_name):
    return {"name": volume_name, "configMap": {"name": configmap_name}}


def build_volumes(name, spec):
    volumes = [
        {
            "name": DB_STORAGE_VOLUME,
            "persistentVolumeClaim": {"claimName": pvc_name(name)},
        }
    ]

    if spec.database.initScript is not None:
        volumes.append(configmap_volume(INIT_SCRIPT_VOLUME, spec.database.initScript))

    if spec.litestream_enabled:
        volumes.append(
            configmap_volume(LITESTREAM_CONFIG_VOLUME, litestream_config_name(name))
        )

    if spec.sqlite_rest_enabled:
        volumes.append(
            configmap_volume(SQLITE_REST_CONFIG_VOLUME, sqlite_rest_config_name(name))
        )
        if spec.sqliteRest.authSecret is not None:
            volumes.append(
                {
                    "name": SQLITE_REST_AUTH_VOLUME,
                    "secret": {"secretName": spec.sqliteRest.authSecret},
                }
            )

    return volumes


def build_deployment(name, namespace, spec):
    """ Build the single-replica Deployment running the database pod.

    Args:
        name: SqliteDatabase name
        namespace: SqliteDatabase namespace
        spec: Defaulted SqliteDatabaseSpec
    """
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": object_meta(deployment_name(name), namespace, name),
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": selector_labels(name)},
            "template": {
                "metadata": {"labels": selector_labels(name)},
                "spec": {
                    "initContainers": build_init_containers(spec),
                    "containers": build_containers(spec),
                    "volumes": build_volumes(name, spec),
                },
            },
        },
    }
