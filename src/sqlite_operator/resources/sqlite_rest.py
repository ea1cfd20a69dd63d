""" sqlite-rest API config builder.
"""

from .common import database_path, object_meta, sqlite_rest_config_name
from .templates import render_template

CONFIG_KEY = "sqlite-rest.yml"
AUTH_MOUNT_PATH = "/etc/auth"
AUTH_TOKEN_FILE = f"{AUTH_MOUNT_PATH}/token"


def build_sqlite_rest_config(spec):
    """ Render sqlite-rest.yml for a defaulted spec.

    The auth token, table allowlist and metrics directives are only
    emitted when the matching spec field is set.
    """
    rest = spec.sqliteRest
    return render_template(
        "sqlite-rest.yml.j2",
        port=rest.port,
        dsn=database_path(spec),
        auth_token_file=AUTH_TOKEN_FILE if rest.authSecret is not None else None,
        allowed_tables=rest.allowedTables,
        metrics_port=rest.metrics.port if spec.metrics_enabled else None,
    )


def build_sqlite_rest_configmap(name, namespace, spec):
    """ Build the ConfigMap holding the sqlite-rest server config.

    Args:
        name: SqliteDatabase name
        namespace: SqliteDatabase namespace
        spec: Defaulted SqliteDatabaseSpec
    """
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": object_meta(sqlite_rest_config_name(name), namespace, name),
        "data": {CONFIG_KEY: build_sqlite_rest_config(spec)},
    }
