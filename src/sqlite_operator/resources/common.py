"""Names, labels and owner references shared by all builders."""

APP_NAME = "sqlite-database"
MANAGED_BY = "sqlite-operator"

DB_MOUNT_PATH = "/var/lib/sqlite"
DB_STORAGE_VOLUME = "db-storage"


def pvc_name(name):
    return f"{name}-db-storage"


def litestream_config_name(name):
    return f"{name}-litestream-config"


def sqlite_rest_config_name(name):
    return f"{name}-sqlite-rest-config"


def deployment_name(name):
    return name


def service_name(name):
    return f"{name}-service"


def ingress_name(name):
    return f"{name}-ingress"


def database_path(spec):
    """Absolute path of the database file inside every container."""
    return f"{DB_MOUNT_PATH}/{spec.database.name}"


def selector_labels(name):
    """Labels used to select the database pod."""
    return {
        "app.kubernetes.io/name": APP_NAME,
        "app.kubernetes.io/instance": name,
    }


def standard_labels(name):
    """Labels applied to every object owned by a SqliteDatabase."""
    return {
        **selector_labels(name),
        "app.kubernetes.io/managed-by": MANAGED_BY,
    }


def object_meta(name, namespace, owner_name, annotations=None):
    """Build the metadata block for an owned object."""
    metadata = {
        "name": name,
        "namespace": namespace,
        "labels": standard_labels(owner_name),
    }
    if annotations:
        metadata["annotations"] = dict(annotations)
    return metadata


def build_owner_reference(owner):
    """Build a controller owner reference pointing at ``owner``.

    Args:
        owner: Parent object body (dict with apiVersion, kind and metadata)
    """
    return {
        "apiVersion": owner["apiVersion"],
        "kind": owner["kind"],
        "name": owner["metadata"]["name"],
        "uid": owner["metadata"]["uid"],
        "controller": True,
        "blockOwnerDeletion": True,
    }
