""" Storage claim builder for the database volume.
"""

from .common import object_meta, pvc_name

ACCESS_MODES = {
    "ReadWriteOnce": "ReadWriteOnce",
    "ReadWriteMany": "ReadWriteMany",
    "ReadOnlyMany": "ReadOnlyMany",
}
DEFAULT_ACCESS_MODE = "ReadWriteOnce"


def build_pvc(name, namespace, spec):
    """ Build the PersistentVolumeClaim holding the database file.

    Args:
        name: SqliteDatabase name
        namespace: SqliteDatabase namespace
        spec: Defaulted SqliteDatabaseSpec
    """
    storage = spec.database.storage
    access_mode = ACCESS_MODES.get(storage.accessMode, DEFAULT_ACCESS_MODE)

    pvc_spec = {
        "accessModes": [access_mode],
        "resources": {"requests": {"storage": storage.size}},
    }
    if storage.storageClass is not None:
        pvc_spec["storageClassName"] = storage.storageClass

    return {
        "apiVersion": "v1",
        "kind": "PersistentVolumeClaim",
        "metadata": object_meta(pvc_name(name), namespace, name),
        "spec": pvc_spec,
    }
