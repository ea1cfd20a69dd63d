""" Thin wrapper around the Kubernetes API used by the reconciler.

Objects go in and come out as plain manifest dicts so the reconciler can
compare live and desired state without caring about client model classes.
"""

import logging

import kubernetes
from kubernetes.client.exceptions import ApiException

from sqlite_operator.models.database import GROUP, PLURAL, VERSION

logger = logging.getLogger(__name__)

# kind -> (API class, method suffix)
KIND_APIS = {
    "PersistentVolumeClaim": ("CoreV1Api", "namespaced_persistent_volume_claim"),
    "ConfigMap": ("CoreV1Api", "namespaced_config_map"),
    "Service": ("CoreV1Api", "namespaced_service"),
    "Deployment": ("AppsV1Api", "namespaced_deployment"),
    "Ingress": ("NetworkingV1Api", "namespaced_ingress"),
}


class ClusterClient:
    """ Read and write SqliteDatabases and the objects they own.

    Holds no state beyond the API client, so one instance per reconcile is
    fine.
    """

    def __init__(self, api_client=None):
        self.api_client = api_client or kubernetes.client.ApiClient()
        self.custom = kubernetes.client.CustomObjectsApi(self.api_client)

    def _api_for(self, kind):
        try:
            api_name, suffix = KIND_APIS[kind]
        except KeyError:
            raise ValueError(f"Unsupported kind: {kind}")
        api = getattr(kubernetes.client, api_name)(self.api_client)
        return api, suffix

    def _to_dict(self, obj):
        return self.api_client.sanitize_for_serialization(obj)

    def get(self, kind, name, namespace):
        """ Read an object.

        Returns:
            The object as a dict, or None if it does not exist
        """
        api, suffix = self._api_for(kind)
        try:
            obj = getattr(api, f"read_{suffix}")(name=name, namespace=namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise
        return self._to_dict(obj)

    def create(self, kind, namespace, body):
        api, suffix = self._api_for(kind)
        obj = getattr(api, f"create_{suffix}")(namespace=namespace, body=body)
        return self._to_dict(obj)

    def replace(self, kind, name, namespace, body):
        """ Replace an object.

        ``body`` must carry the resourceVersion it was read at; the API
        server rejects the write with 409 if the object changed since.
        """
        api, suffix = self._api_for(kind)
        obj = getattr(api, f"replace_{suffix}")(
            name=name, namespace=namespace, body=body
        )
        return self._to_dict(obj)

    def get_database(self, name, namespace):
        """ Read a SqliteDatabase.

        Returns:
            The resource body, or None if it has been deleted
        """
        try:
            return self.custom.get_namespaced_custom_object(
                group=GROUP,
                version=VERSION,
                namespace=namespace,
                plural=PLURAL,
                name=name,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def update_database_status(self, body, status):
        """ Write ``status`` to the status subresource of ``body``.

        Returns:
            The updated resource body, with its new resourceVersion
        """
        metadata = body["metadata"]
        new_body = {**body, "status": status}
        return self.custom.replace_namespaced_custom_object_status(
            group=GROUP,
            version=VERSION,
            namespace=metadata["namespace"],
            plural=PLURAL,
            name=metadata["name"],
            body=new_body,
        )
