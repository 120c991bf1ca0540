"""
Resolution factory and default config chain.

This module provides the main entry points for resolving a cluster
connection and implements the default chain: kubeconfig first, the
in-cluster service account otherwise.
"""

import logging

from kubernetes.client import ApiClient

from .client import to_api_client
from .config import ResolverConfig
from .exceptions import ConfigurationError
from .model import K8sClusterConfig
from .strategies.base import ConfigStrategy
from .strategies.kubeconfig import KubeconfigStrategy
from .strategies.serviceaccount import ServiceAccountStrategy

logger = logging.getLogger(__name__)


def resolve_cluster_config(config: ResolverConfig | None = None) -> K8sClusterConfig:
    """Resolve the cluster connection descriptor.

    Args:
        config: Optional ResolverConfig. If None, uses the default chain.

    Returns:
        Immutable K8sClusterConfig

    Raises:
        ConfigurationError: If configuration is invalid
        ClusterConfigError: If an explicitly requested method fails

    Example:
        >>> cluster = resolve_cluster_config()
        >>> cluster.host
        'https://127.0.0.1:6443'
    """
    if config is None:
        config = ResolverConfig()

    logger.debug(f"Resolving cluster config with {config}")
    cluster_config = ConfigFactory(config).resolve()

    if config.drop_trailing_dot:
        cluster_config = cluster_config.drop_trailing_dot()
    return cluster_config


def get_k8s_client(config: ResolverConfig | None = None) -> ApiClient:
    """Resolve the cluster connection and return a ready-to-use ApiClient.

    Example:
        >>> from kubernetes import client
        >>> api_client = get_k8s_client()
        >>> v1 = client.CoreV1Api(api_client)
    """
    return to_api_client(resolve_cluster_config(config))


class ConfigFactory:
    """Select and run resolution strategies.

    Args:
        config: ResolverConfig instance with resolution options
    """

    def __init__(self, config: ResolverConfig) -> None:
        self.config = config

    def get_strategy(self, method: str) -> ConfigStrategy:
        """Get strategy by explicit method name.

        Args:
            method: Strategy name ("kubeconfig", "serviceaccount")

        Raises:
            ConfigurationError: If method is unknown
        """
        strategy_map = {
            "kubeconfig": KubeconfigStrategy,
            "serviceaccount": ServiceAccountStrategy,
        }

        strategy_class = strategy_map.get(method)
        if strategy_class is None:
            available = ", ".join(sorted(strategy_map.keys()))
            raise ConfigurationError(
                f"Unknown resolution method: {method}",
                f"Available methods: {available}"
            )
        return strategy_class(self.config)

    def resolve(self) -> K8sClusterConfig:
        """Resolve using the configured method, or the default chain for "auto"."""
        if self.config.method != "auto":
            strategy = self.get_strategy(self.config.method)
            logger.info(f"Using resolution strategy: {strategy.get_description()}")
            return strategy.resolve()

        return self._resolve_default_chain()

    def _resolve_default_chain(self) -> K8sClusterConfig:
        """Try the kubeconfig, then fall back to the in-cluster service account.

        Any failure of the kubeconfig path triggers the fallback, whatever its
        cause. The kubeconfig error is only logged.
        """
        kubeconfig_strategy = KubeconfigStrategy(self.config)
        try:
            cluster_config = kubeconfig_strategy.resolve()
            logger.info(f"Using resolution strategy: {kubeconfig_strategy.get_description()}")
            return cluster_config
        except Exception as e:
            logger.debug(
                f"Kubeconfig resolution failed, falling back to service account: "
                f"{type(e).__name__}: {e}"
            )

        serviceaccount_strategy = ServiceAccountStrategy(self.config)
        logger.info(f"Using resolution strategy: {serviceaccount_strategy.get_description()}")
        return serviceaccount_strategy.resolve()
