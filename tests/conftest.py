"""Shared fixtures: an in-memory stand-in for the Kubernetes API."""

import copy

import pytest
from kubernetes.client.exceptions import ApiException

from sqlite_operator.models.database import GROUP, KIND, VERSION


class FakeCluster:
    """In-memory implementation of the ClusterClient interface.

    Records every write so tests can assert on idempotence, and checks
    resourceVersions on replace the way the API server does.
    """

    def __init__(self):
        self.objects = {}
        self.databases = {}
        self.writes = []
        self.status_writes = []
        self.failures = {}
        self._version = 0

    def _next_version(self):
        self._version += 1
        return str(self._version)

    def fail(self, verb, kind, status=500, reason="Internal Server Error"):
        """Make every ``verb`` call for ``kind`` raise an ApiException."""
        self.failures[(verb, kind)] = ApiException(status=status, reason=reason)

    def _maybe_fail(self, verb, kind):
        error = self.failures.get((verb, kind))
        if error is not None:
            raise error

    def add_database(self, name, namespace="default", spec=None, generation=1, status=None):
        body = {
            "apiVersion": f"{GROUP}/{VERSION}",
            "kind": KIND,
            "metadata": {
                "name": name,
                "namespace": namespace,
                "uid": f"uid-{name}",
                "generation": generation,
                "resourceVersion": self._next_version(),
            },
            "spec": spec or {},
        }
        if status is not None:
            body["status"] = status
        self.databases[(namespace, name)] = body
        return body

    def database(self, name, namespace="default"):
        return self.databases[(namespace, name)]

    def set_ready_replicas(self, name, namespace="default", count=1):
        deployment = self.objects[("Deployment", namespace, name)]
        deployment.setdefault("status", {})["readyReplicas"] = count

    def dependent_writes(self):
        return [write for write in self.writes if write[0] in ("create", "replace")]

    def get(self, kind, name, namespace):
        self._maybe_fail("get", kind)
        obj = self.objects.get((kind, namespace, name))
        return copy.deepcopy(obj) if obj is not None else None

    def create(self, kind, namespace, body):
        self._maybe_fail("create", kind)
        name = body["metadata"]["name"]
        key = (kind, namespace, name)
        if key in self.objects:
            raise ApiException(status=409, reason="AlreadyExists")
        obj = copy.deepcopy(body)
        obj["metadata"]["resourceVersion"] = self._next_version()
        self.objects[key] = obj
        self.writes.append(("create", kind, name))
        return copy.deepcopy(obj)

    def replace(self, kind, name, namespace, body):
        self._maybe_fail("replace", kind)
        key = (kind, namespace, name)
        current = self.objects.get(key)
        if current is None:
            raise ApiException(status=404, reason="NotFound")
        if body["metadata"].get("resourceVersion") != current["metadata"]["resourceVersion"]:
            raise ApiException(status=409, reason="Conflict")
        obj = copy.deepcopy(body)
        obj["metadata"]["resourceVersion"] = self._next_version()
        self.objects[key] = obj
        self.writes.append(("replace", kind, name))
        return copy.deepcopy(obj)

    def get_database(self, name, namespace):
        self._maybe_fail("get", KIND)
        body = self.databases.get((namespace, name))
        return copy.deepcopy(body) if body is not None else None

    def update_database_status(self, body, status):
        self._maybe_fail("update_status", KIND)
        metadata = body["metadata"]
        key = (metadata["namespace"], metadata["name"])
        current = self.databases[key]
        if metadata["resourceVersion"] != current["metadata"]["resourceVersion"]:
            raise ApiException(status=409, reason="Conflict")
        updated = copy.deepcopy(current)
        updated["status"] = copy.deepcopy(status)
        updated["metadata"]["resourceVersion"] = self._next_version()
        self.databases[key] = updated
        self.status_writes.append(copy.deepcopy(status))
        return copy.deepcopy(updated)


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture
def owner():
    return {
        "apiVersion": f"{GROUP}/{VERSION}",
        "kind": KIND,
        "metadata": {"name": "app", "namespace": "default", "uid": "uid-app"},
    }
