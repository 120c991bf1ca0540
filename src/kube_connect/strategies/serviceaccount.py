"""
In-cluster service account strategy.

This strategy points at the service account token automatically mounted
into Kubernetes pods. This is the standard way for workloads running
inside a cluster to reach the API server.
"""

import logging
import os
from pathlib import Path

from ..keys import FromFile
from ..model import K8sClientConfig, K8sClusterConfig, Secure, ServiceAccountToken
from .base import ConfigStrategy

logger = logging.getLogger(__name__)


# Standard paths for in-cluster service account credentials
SERVICE_ACCOUNT_PATH = Path("/var/run/secrets/kubernetes.io/serviceaccount")
TOKEN_PATH = SERVICE_ACCOUNT_PATH / "token"
CA_CERT_PATH = SERVICE_ACCOUNT_PATH / "ca.crt"
NAMESPACE_PATH = SERVICE_ACCOUNT_PATH / "namespace"

IN_CLUSTER_HOST = "https://kubernetes.default.svc"


class ServiceAccountStrategy(ConfigStrategy):
    """Resolve the connection for a workload running inside a Pod.

    The result always points at:
    - Host: https://kubernetes.default.svc
    - Token: /var/run/secrets/kubernetes.io/serviceaccount/token
    - CA certificate: /var/run/secrets/kubernetes.io/serviceaccount/ca.crt

    Nothing is read during resolution; the token and certificate are only
    opened when a transport materializes them.

    Example:
        >>> # Inside a Kubernetes Pod
        >>> config = ResolverConfig(method="serviceaccount")
        >>> cluster = ServiceAccountStrategy(config).resolve()
    """

    def is_available(self) -> bool:
        """Check if the service account credentials are mounted."""
        has_token = TOKEN_PATH.is_file()
        has_ca = CA_CERT_PATH.is_file()

        if not has_token:
            logger.debug(f"Service account token not found at {TOKEN_PATH}")
            return False

        if not has_ca:
            logger.debug(f"CA certificate not found at {CA_CERT_PATH}")
            return False

        if not os.access(TOKEN_PATH, os.R_OK):
            logger.warning(f"Service account token is not readable: {TOKEN_PATH}")
            return False

        return True

    def resolve(self) -> K8sClusterConfig:
        """Build the in-cluster connection descriptor.

        Returns:
            K8sClusterConfig using the mounted service account token
        """
        if not self.is_available():
            logger.warning(
                "Service account credentials are not mounted; requests will fail "
                "unless this runs inside a Kubernetes Pod"
            )

        namespace = self._get_namespace()
        if namespace:
            logger.info(f"Running in namespace: {namespace}")

        return K8sClusterConfig(
            host=IN_CLUSTER_HOST,
            authentication=ServiceAccountToken(FromFile(TOKEN_PATH)),
            client=K8sClientConfig(
                self.config.debug,
                Secure(FromFile(CA_CERT_PATH), disable_hostname_verification=False),
            ),
        )

    def _get_namespace(self) -> str | None:
        """Get the namespace this pod is running in, if mounted."""
        try:
            if NAMESPACE_PATH.exists():
                return NAMESPACE_PATH.read_text().strip()
        except OSError as e:
            logger.debug(f"Could not read namespace file: {e}")

        return None

    def get_description(self) -> str:
        namespace = self._get_namespace()
        if namespace:
            return f"In-Cluster Service Account (namespace: {namespace})"
        return "In-Cluster Service Account"
