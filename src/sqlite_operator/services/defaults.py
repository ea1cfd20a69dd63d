""" Spec parsing and defaulting.
"""

from pydantic import ValidationError

from sqlite_operator.exceptions import InvalidSpecError
from sqlite_operator.models.database import (
    IngressConfig,
    LitestreamConfig,
    MetricsConfig,
    SqliteDatabaseSpec,
    SqliteRestConfig,
)

DEFAULT_DATABASE_NAME = "database.db"
DEFAULT_STORAGE_SIZE = "1Gi"
# ReadWriteMany lets the sidecars share the volume on distributed filesystems
DEFAULT_ACCESS_MODE = "ReadWriteMany"
DEFAULT_SQLITE_REST_PORT = 8080
DEFAULT_METRICS_PORT = 8081


def parse_spec(raw_spec):
    """ Validate a raw spec mapping into a SqliteDatabaseSpec.

    Raises:
        InvalidSpecError: the mapping does not match the CRD model
    """
    try:
        return SqliteDatabaseSpec.model_validate(raw_spec or {})
    except ValidationError as e:
        raise InvalidSpecError(f"invalid SqliteDatabase spec: {e}") from e


def apply_defaults(spec):
    """ Return a copy of ``spec`` with every unset optional field filled in.

    Never raises, and applying it to an already defaulted spec is a no-op.
    """
    spec = spec.model_copy(deep=True)

    database = spec.database
    if not database.name:
        database.name = DEFAULT_DATABASE_NAME
    if not database.storage.size:
        database.storage.size = DEFAULT_STORAGE_SIZE
    if not database.storage.accessMode:
        database.storage.accessMode = DEFAULT_ACCESS_MODE

    if spec.litestream is None:
        spec.litestream = LitestreamConfig(enabled=True)

    if spec.sqliteRest is None:
        spec.sqliteRest = SqliteRestConfig(
            enabled=False,
            port=DEFAULT_SQLITE_REST_PORT,
            metrics=MetricsConfig(enabled=True, port=DEFAULT_METRICS_PORT),
        )

    if spec.ingress is None:
        spec.ingress = IngressConfig(enabled=False)

    return spec
