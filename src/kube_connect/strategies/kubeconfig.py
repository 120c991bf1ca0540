"""
Kubeconfig resolution strategy.

This strategy reads the standard Kubernetes kubeconfig file
(~/.kube/config) and resolves the selected context into a cluster
connection descriptor.
"""

import logging
import os
from pathlib import Path

from ..credentials import user_to_authentication
from ..exceptions import NotFoundError
from ..keys import key_source_from
from ..kubeconfig import Kubeconfig
from ..model import (
    Insecure,
    K8sClientConfig,
    K8sClusterConfig,
    K8sServerCertificate,
    Secure,
    parse_server_uri,
)
from .base import ConfigStrategy

logger = logging.getLogger(__name__)


class KubeconfigStrategy(ConfigStrategy):
    """Resolve the connection from a kubeconfig file.

    The strategy searches for kubeconfig in this order:
    1. Path specified in ResolverConfig.kubeconfig_path
    2. Path specified in KUBECONFIG environment variable
    3. Default path: ~/.kube/config

    Example:
        >>> config = ResolverConfig(method="kubeconfig", context="staging")
        >>> cluster = KubeconfigStrategy(config).resolve()
    """

    def is_available(self) -> bool:
        """Check if a kubeconfig file can be located and read."""
        kubeconfig_path = self._get_kubeconfig_path()
        if kubeconfig_path is None:
            logger.debug("No kubeconfig path could be determined")
            return False

        if not os.path.exists(kubeconfig_path):
            logger.debug(f"Kubeconfig file does not exist: {kubeconfig_path}")
            return False

        if not os.access(kubeconfig_path, os.R_OK):
            logger.warning(f"Kubeconfig file is not readable: {kubeconfig_path}")
            return False

        return True

    def resolve(self) -> K8sClusterConfig:
        """Locate, parse and resolve the kubeconfig.

        Raises:
            NotFoundError: If no kubeconfig path is known, or the file, context,
                cluster or user is missing
            ParseError: If the file or the server URI is malformed
        """
        kubeconfig_path = self._get_kubeconfig_path()
        if kubeconfig_path is None:
            raise NotFoundError(
                "Neither KUBECONFIG nor the user's home directory is known",
                f"Checked:\n"
                f"1. Config parameter: {self.config.kubeconfig_path}\n"
                f"2. KUBECONFIG env var: {os.getenv('KUBECONFIG')}\n"
                f"3. Default path: ~/.kube/config"
            )

        logger.info(f"Resolving cluster config from kubeconfig: {kubeconfig_path}")
        return self.resolve_file(kubeconfig_path)

    def resolve_file(self, kubeconfig_path: str) -> K8sClusterConfig:
        """Resolve the connection from a specific kubeconfig file.

        Args:
            kubeconfig_path: Path to the kubeconfig file to load
        """
        kubeconfig = Kubeconfig.load(kubeconfig_path)

        context_name = self.config.context or kubeconfig.current_context
        context = kubeconfig.context_map.get(context_name) if context_name else None
        if context is None:
            raise NotFoundError(
                f"Could not find context {context_name} in kubeconfig {kubeconfig_path}",
                f"Available contexts: {', '.join(sorted(kubeconfig.context_map)) or 'none'}"
            )
        logger.debug(f"Using context {context_name}")

        cluster = kubeconfig.cluster_map.get(context.cluster)
        if cluster is None:
            raise NotFoundError(
                f"Could not find cluster {context.cluster} in kubeconfig {kubeconfig_path}"
            )

        user = kubeconfig.user_map.get(context.user)
        if user is None:
            raise NotFoundError(
                f"Could not find user {context.user} in kubeconfig {kubeconfig_path}"
            )

        host = parse_server_uri(cluster.server)
        authentication = user_to_authentication(user, kubeconfig_path)

        server_certificate: K8sServerCertificate
        if (
            cluster.insecure_skip_tls_verify
            and cluster.certificate_authority is None
            and cluster.certificate_authority_data is None
        ):
            logger.warning(f"Cluster {context.cluster} skips TLS verification")
            server_certificate = Insecure()
        else:
            server_certificate = Secure(
                key_source_from(cluster.certificate_authority, cluster.certificate_authority_data),
                self.config.disable_hostname_verification,
            )

        return K8sClusterConfig(
            host=host,
            authentication=authentication,
            client=K8sClientConfig(self.config.debug, server_certificate),
        )

    def _get_kubeconfig_path(self) -> str | None:
        """Determine the kubeconfig file path to use.

        Checks in order:
        1. ResolverConfig.kubeconfig_path (explicit configuration)
        2. KUBECONFIG environment variable
        3. Default ~/.kube/config, whether or not it exists

        Returns:
            Path to kubeconfig file, or None if the home directory is unknown
        """
        if self.config.kubeconfig_path:
            return self.config.kubeconfig_path

        kubeconfig_env = os.getenv("KUBECONFIG")
        if kubeconfig_env:
            # KUBECONFIG can contain multiple paths separated by ':'
            # Take the first one
            paths = [p for p in kubeconfig_env.split(os.pathsep) if p]
            if paths:
                return paths[0]

        try:
            home = Path.home()
        except (RuntimeError, KeyError) as e:
            logger.debug(f"Could not determine home directory: {e}")
            return None
        if not home.is_absolute():
            return None

        return str(home / ".kube" / "config")

    def get_description(self) -> str:
        kubeconfig_path = self._get_kubeconfig_path()
        if kubeconfig_path:
            return f"Kubeconfig ({kubeconfig_path})"
        return "Kubeconfig (not found)"
