import kopf
import logging
import kubernetes

from sqlite_operator.config import get_log_level, get_operator_settings, get_watch_namespace
from sqlite_operator.models.database import GROUP, PLURAL, VERSION

logging.basicConfig(
    level=getattr(logging, get_log_level(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Registers the kopf handlers
from sqlite_operator import handlers  # noqa: E402,F401


@kopf.on.startup()
def startup_fn(settings: kopf.OperatorSettings, **kwargs):
    """Configure the operator."""
    logger.info("SQLite Operator is starting up...")

    # Load Kubernetes configuration
    try:
        kubernetes.config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except kubernetes.config.ConfigException:
        try:
            kubernetes.config.load_kube_config()
            logger.info("Loaded local Kubernetes config")
        except Exception as e:
            logger.warning(f"Could not load Kubernetes config: {e}")

    # Configure operator settings
    operator_settings = get_operator_settings()
    settings.batching.worker_limit = operator_settings["worker_limit"]
    settings.posting.enabled = operator_settings["posting_enabled"]
    settings.watching.server_timeout = operator_settings["server_timeout"]
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(prefix=GROUP)
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(prefix=GROUP)

    logger.info(f"Serving CRD: {PLURAL}.{GROUP}/{VERSION}")
    logger.info(f"Worker limit: {settings.batching.worker_limit}")
    logger.info(f"Posting enabled: {settings.posting.enabled}")
    logger.info("SQLite Operator startup complete")


@kopf.on.cleanup()
def cleanup_fn(**kwargs):
    """Cleanup operator resources."""
    logger.info("SQLite Operator shutdown complete")


def main(namespace=None):
    namespace = namespace or get_watch_namespace()
    try:
        if namespace:
            logger.info(f"Watching namespace {namespace}")
            kopf.run(namespaces=[namespace])
        else:
            kopf.run(clusterwide=True)
    except KeyboardInterrupt:
        logger.info("Operator stopped by user")
    except Exception as e:
        logger.error(f"Operator failed: {e}")
        raise


if __name__ == "__main__":
    main()
