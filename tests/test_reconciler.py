"""End-to-end reconcile tests against the in-memory cluster."""

import pytest
import yaml
from kubernetes.client.exceptions import ApiException

from sqlite_operator.exceptions import InvalidSpecError, PreconditionError
from sqlite_operator.services.reconciler import reconcile_database

OWNER_REF = {
    "apiVersion": "database.sqlite.io/v1alpha1",
    "kind": "SqliteDatabase",
    "name": "app",
    "uid": "uid-app",
    "controller": True,
    "blockOwnerDeletion": True,
}


def kinds(cluster):
    return sorted((kind, name) for kind, _, name in cluster.objects)


def test_missing_database_is_a_no_op(cluster):
    assert reconcile_database(cluster, "gone", "default") is None
    assert cluster.writes == []
    assert cluster.status_writes == []


def test_default_spec_creates_storage_litestream_and_deployment(cluster):
    cluster.add_database("app")

    status = reconcile_database(cluster, "app", "default")

    assert kinds(cluster) == [
        ("ConfigMap", "app-litestream-config"),
        ("Deployment", "app"),
        ("PersistentVolumeClaim", "app-db-storage"),
    ]
    assert [write[1] for write in cluster.writes] == [
        "PersistentVolumeClaim",
        "ConfigMap",
        "Deployment",
    ]
    assert status.phase == "Pending"
    assert status.message == "starting"


def test_every_created_object_is_owned(cluster):
    cluster.add_database(
        "app",
        spec={
            "sqliteRest": {"enabled": True},
            "ingress": {"enabled": True, "host": "db.example.com"},
        },
    )

    reconcile_database(cluster, "app", "default")

    assert len(cluster.objects) == 6
    for obj in cluster.objects.values():
        assert obj["metadata"]["ownerReferences"] == [OWNER_REF]


def test_api_scenario(cluster):
    cluster.add_database(
        "app",
        spec={
            "database": {"name": "app.db", "storage": {"size": "2Gi"}},
            "sqliteRest": {"enabled": True, "port": 8080},
        },
    )

    reconcile_database(cluster, "app", "default")

    pvc = cluster.objects[("PersistentVolumeClaim", "default", "app-db-storage")]
    assert pvc["spec"]["resources"]["requests"]["storage"] == "2Gi"

    deployment = cluster.objects[("Deployment", "default", "app")]
    containers = {c["name"]: c for c in deployment["spec"]["template"]["spec"]["containers"]}
    assert {"name": "http", "containerPort": 8080} in containers["sqlite-rest"]["ports"]

    service = cluster.objects[("Service", "default", "app-service")]
    assert service["spec"]["ports"][0]["targetPort"] == 8080

    assert ("Ingress", "default", "app-ingress") not in cluster.objects


def test_replication_scenario(cluster):
    cluster.add_database(
        "app",
        spec={
            "litestream": {
                "replicas": [
                    {"type": "s3", "bucket": "b1", "path": "p1"},
                    {"type": "local", "path": "p2"},
                ]
            }
        },
    )

    reconcile_database(cluster, "app", "default")

    configmap = cluster.objects[("ConfigMap", "default", "app-litestream-config")]
    config = yaml.safe_load(configmap["data"]["litestream.yml"])
    assert [db["replica"]["url"] for db in config["dbs"]] == ["s3://b1/p1", "file:///backups/p2"]


def test_second_reconcile_writes_no_dependents(cluster):
    cluster.add_database(
        "app",
        spec={
            "sqliteRest": {"enabled": True},
            "ingress": {"enabled": True, "host": "db.example.com"},
        },
    )

    reconcile_database(cluster, "app", "default")
    writes = len(cluster.dependent_writes())
    reconcile_database(cluster, "app", "default")

    assert len(cluster.dependent_writes()) == writes


def test_status_follows_workload_readiness(cluster):
    cluster.add_database("app")

    status = reconcile_database(cluster, "app", "default")
    assert status.phase == "Pending"

    cluster.set_ready_replicas("app", count=1)
    status = reconcile_database(cluster, "app", "default")

    assert status.phase == "Running"
    assert status.replicas == 1
    stored = cluster.database("app")["status"]
    assert stored["phase"] == "Running"
    assert stored["replicas"] == 1
    assert stored["conditions"][0]["type"] == "Ready"
    assert stored["conditions"][0]["status"] == "True"


def test_running_status_publishes_endpoints(cluster):
    cluster.add_database("app", namespace="prod", spec={"sqliteRest": {"enabled": True}})
    reconcile_database(cluster, "app", "prod")
    cluster.set_ready_replicas("app", namespace="prod")

    status = reconcile_database(cluster, "app", "prod", cluster_domain="svc.cluster.local")

    assert status.endpoints.rest == "http://app-service.prod.svc.cluster.local:8080"


def test_observed_generation_written_before_dependents(cluster):
    cluster.add_database("app", generation=3)
    cluster.fail("create", "PersistentVolumeClaim")

    with pytest.raises(ApiException):
        reconcile_database(cluster, "app", "default")

    assert cluster.status_writes == [{"conditions": [], "observedGeneration": 3}]
    assert cluster.database("app")["status"]["observedGeneration"] == 3


def test_observed_generation_not_rewritten_when_current(cluster):
    cluster.add_database("app", generation=2, status={"observedGeneration": 2})

    reconcile_database(cluster, "app", "default")

    # Only the final status write
    assert len(cluster.status_writes) == 1
    assert cluster.status_writes[0]["observedGeneration"] == 2


def test_store_error_short_circuits_later_steps(cluster):
    cluster.add_database("app")
    cluster.fail("create", "ConfigMap")

    with pytest.raises(ApiException):
        reconcile_database(cluster, "app", "default")

    assert kinds(cluster) == [("PersistentVolumeClaim", "app-db-storage")]


def test_reconcile_resumes_after_partial_failure(cluster):
    cluster.add_database("app")
    cluster.fail("create", "Deployment")
    with pytest.raises(ApiException):
        reconcile_database(cluster, "app", "default")

    cluster.failures.clear()
    status = reconcile_database(cluster, "app", "default")

    assert ("Deployment", "app") in kinds(cluster)
    assert status.message == "starting"


def test_ingress_without_host_fails_and_creates_no_ingress(cluster):
    cluster.add_database(
        "app",
        spec={"sqliteRest": {"enabled": True}, "ingress": {"enabled": True}},
    )

    with pytest.raises(PreconditionError, match="ingress host is required"):
        reconcile_database(cluster, "app", "default")

    assert ("Ingress", "default", "app-ingress") not in cluster.objects
    # Everything before the ingress step was still applied
    assert ("Service", "default", "app-service") in cluster.objects
    status = cluster.database("app")["status"]
    assert status["phase"] == "Failed"
    assert status["message"] == "ingress host is required when ingress is enabled"
    assert status["conditions"][0]["reason"] == "InvalidSpec"


def test_invalid_spec_is_reported_in_status(cluster):
    cluster.add_database("app", spec={"database": {"storage": {"accessMode": "Sometimes"}}})

    with pytest.raises(InvalidSpecError):
        reconcile_database(cluster, "app", "default")

    assert cluster.objects == {}
    assert cluster.database("app")["status"]["phase"] == "Failed"


def test_workload_lookup_error_sets_failed_phase(cluster):
    cluster.add_database("app")
    reconcile_database(cluster, "app", "default")

    class FlakyDeploymentReads:
        """Deployment reads fail only after the ensure step has passed."""

        def __init__(self):
            self.reads = 0

        def __getattr__(self, attr):
            return getattr(cluster, attr)

        def get(self, kind, name, namespace):
            if kind == "Deployment":
                self.reads += 1
                if self.reads > 1:
                    raise ApiException(status=503, reason="Service Unavailable")
            return cluster.get(kind, name, namespace)

    status = reconcile_database(FlakyDeploymentReads(), "app", "default")

    assert status.phase == "Failed"
    assert "Service Unavailable" in status.message


def test_invalid_edit_of_running_database_clears_endpoints(cluster):
    cluster.add_database("app", spec={"sqliteRest": {"enabled": True}})
    reconcile_database(cluster, "app", "default")
    cluster.set_ready_replicas("app")
    assert reconcile_database(cluster, "app", "default").endpoints is not None

    body = cluster.database("app")
    body["spec"]["ingress"] = {"enabled": True}
    body["metadata"]["generation"] = 2

    with pytest.raises(PreconditionError):
        reconcile_database(cluster, "app", "default")

    status = cluster.database("app")["status"]
    assert status["phase"] == "Failed"
    assert status["replicas"] == 0
    assert "endpoints" not in status
    assert status["observedGeneration"] == 2


def test_invalid_spec_still_records_observed_generation(cluster):
    cluster.add_database("app", generation=4, spec={"bogus": 1})

    with pytest.raises(InvalidSpecError):
        reconcile_database(cluster, "app", "default")

    status = cluster.database("app")["status"]
    assert status["observedGeneration"] == 4
    assert status["phase"] == "Failed"
