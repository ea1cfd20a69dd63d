"""SqliteDatabase CRD models."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from sqlite_operator.crd.base import CRDSpec, CRDStatus

GROUP = "database.sqlite.io"
VERSION = "v1alpha1"
KIND = "SqliteDatabase"
PLURAL = "sqlitedatabases"

PHASE_PENDING = "Pending"
PHASE_RUNNING = "Running"
PHASE_FAILED = "Failed"
PHASE_TERMINATING = "Terminating"

AccessMode = Literal["ReadWriteOnce", "ReadWriteMany", "ReadOnlyMany"]


class StorageConfig(CRDSpec):
    """Persistent volume settings for the database file."""

    size: Optional[str] = Field(
        default=None,
        description="Size of the persistent volume",
        pattern=r"^([0-9]+(\.[0-9]+)?(E|P|T|G|M|K|Ei|Pi|Ti|Gi|Mi|Ki)?)$",
    )
    storageClass: Optional[str] = Field(
        default=None, description="Storage class for the persistent volume"
    )
    accessMode: Optional[AccessMode] = Field(
        default=None, description="Access mode for the persistent volume"
    )


class DatabaseConfig(CRDSpec):
    """SQLite database file configuration."""

    name: Optional[str] = Field(
        default=None, description="Name of the SQLite database file"
    )
    initScript: Optional[str] = Field(
        default=None,
        description="Name of ConfigMap containing an init.sql initialization script",
    )
    storage: StorageConfig = Field(default_factory=StorageConfig)


class CredentialsConfig(CRDSpec):
    """Reference to a Secret holding storage backend credentials."""

    secretName: str = Field(..., description="Name of the Secret containing credentials")
    accessKeyField: Optional[str] = Field(
        default=None, description="Field name for access key in the secret"
    )
    secretKeyField: Optional[str] = Field(
        default=None, description="Field name for secret key in the secret"
    )


class ReplicaConfig(CRDSpec):
    """A single Litestream replication target."""

    type: str = Field(
        default="s3", description="Storage backend: s3, azure, gcs or local"
    )
    bucket: str = Field(
        default="", description="Bucket name for S3/GCS or container name for Azure"
    )
    region: Optional[str] = Field(default=None, description="Region for S3/GCS")
    endpoint: Optional[str] = Field(default=None, description="Custom S3 endpoint")
    path: Optional[str] = Field(default=None, description="Path within the bucket")
    credentials: Optional[CredentialsConfig] = None
    retention: Optional[str] = Field(
        default=None, description="Retention period for backups"
    )
    retentionCheckInterval: Optional[str] = Field(
        default=None, description="How often to check for expired backups"
    )


class LitestreamConfig(CRDSpec):
    """Litestream replication configuration."""

    enabled: bool = Field(default=True, description="Enable Litestream replication")
    replicas: List[ReplicaConfig] = Field(default_factory=list)


class MetricsConfig(CRDSpec):
    """sqlite-rest metrics listener."""

    enabled: bool = Field(default=True)
    port: int = Field(default=8081, ge=1, le=65535)


class SqliteRestConfig(CRDSpec):
    """sqlite-rest API sidecar configuration."""

    enabled: bool = Field(default=False, description="Enable sqlite-rest API")
    port: int = Field(default=8080, ge=1, le=65535)
    authSecret: Optional[str] = Field(
        default=None, description="Name of Secret containing JWT token/key"
    )
    allowedTables: List[str] = Field(
        default_factory=list, description="List of tables allowed for API access"
    )
    metrics: Optional[MetricsConfig] = None


class TLSConfig(CRDSpec):
    """Ingress TLS settings."""

    enabled: bool = Field(default=False)
    secretName: Optional[str] = Field(default=None, description="Name of TLS secret")


class IngressConfig(CRDSpec):
    """Ingress configuration for external access."""

    enabled: bool = Field(default=False)
    host: Optional[str] = Field(default=None, description="Hostname for the Ingress")
    tls: Optional[TLSConfig] = None


# Unknown fields are rejected, so any field added to the CRD schema (including
# ones the API server fills in from schema defaults) must be declared here too.
class SqliteDatabaseSpec(CRDSpec):
    """SqliteDatabase CRD specification."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    litestream: Optional[LitestreamConfig] = None
    sqliteRest: Optional[SqliteRestConfig] = None
    ingress: Optional[IngressConfig] = None
    resources: Optional[Dict[str, Any]] = Field(
        default=None, description="Resource requests and limits for the sidecars"
    )

    @property
    def litestream_enabled(self):
        return self.litestream is not None and self.litestream.enabled

    @property
    def sqlite_rest_enabled(self):
        return self.sqliteRest is not None and self.sqliteRest.enabled

    @property
    def metrics_enabled(self):
        return (
            self.sqlite_rest_enabled
            and self.sqliteRest.metrics is not None
            and self.sqliteRest.metrics.enabled
        )

    @property
    def ingress_enabled(self):
        return self.ingress is not None and self.ingress.enabled


class EndpointsStatus(BaseModel):
    """API endpoints exposed by the database."""

    rest: Optional[str] = None
    metrics: Optional[str] = None


class SqliteDatabaseStatus(CRDStatus):
    """Observed state of a SqliteDatabase."""

    message: Optional[str] = None
    replicas: Optional[int] = None
    lastBackup: Optional[datetime] = None
    endpoints: Optional[EndpointsStatus] = None

    def to_dict(self):
        """Serialise for the status subresource."""
        return self.model_dump(mode="json", exclude_none=True)
