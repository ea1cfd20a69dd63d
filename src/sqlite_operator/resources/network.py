""" Service and Ingress builders for the sqlite-rest API.
"""

from sqlite_operator.exceptions import PreconditionError

from .common import ingress_name, object_meta, selector_labels, service_name

SERVICE_HTTP_PORT = 8080
SERVICE_METRICS_PORT = 8081
CLUSTER_ISSUER_ANNOTATION = "cert-manager.io/cluster-issuer"
CLUSTER_ISSUER = "letsencrypt-prod"


def build_service_ports(spec):
    ports = [
        {
            "name": "http",
            "port": SERVICE_HTTP_PORT,
            "targetPort": spec.sqliteRest.port,
        }
    ]
    if spec.metrics_enabled:
        ports.append(
            {
                "name": "metrics",
                "port": SERVICE_METRICS_PORT,
                "targetPort": spec.sqliteRest.metrics.port,
            }
        )
    return ports


def build_service(name, namespace, spec):
    """ Build the ClusterIP Service in front of the sqlite-rest sidecar.

    Args:
        name: SqliteDatabase name
        namespace: SqliteDatabase namespace
        spec: Defaulted SqliteDatabaseSpec with sqliteRest enabled
    """
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": object_meta(service_name(name), namespace, name),
        "spec": {
            "type": "ClusterIP",
            "selector": selector_labels(name),
            "ports": build_service_ports(spec),
        },
    }


def build_ingress(name, namespace, spec):
    """ Build the Ingress routing a hostname to the sqlite-rest Service.

    Args:
        name: SqliteDatabase name
        namespace: SqliteDatabase namespace
        spec: Defaulted SqliteDatabaseSpec with ingress enabled

    Raises:
        PreconditionError: ingress is enabled without a host
    """
    ingress = spec.ingress
    if not ingress.host:
        raise PreconditionError("ingress host is required when ingress is enabled")

    tls = ingress.tls
    use_tls = tls is not None and tls.enabled and tls.secretName is not None
    annotations = {CLUSTER_ISSUER_ANNOTATION: CLUSTER_ISSUER} if use_tls else None

    ingress_spec = {
        "rules": [
            {
                "host": ingress.host,
                "http": {
                    "paths": [
                        {
                            "path": "/",
                            "pathType": "Prefix",
                            "backend": {
                                "service": {
                                    "name": service_name(name),
                                    "port": {"number": SERVICE_HTTP_PORT},
                                }
                            },
                        }
                    ]
                },
            }
        ]
    }
    if use_tls:
        ingress_spec["tls"] = [{"hosts": [ingress.host], "secretName": tls.secretName}]

    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": object_meta(ingress_name(name), namespace, name, annotations),
        "spec": ingress_spec,
    }
