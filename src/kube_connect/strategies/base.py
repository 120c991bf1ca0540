"""
Abstract base class for resolution strategies.

This module defines the ConfigStrategy interface that all concrete
resolution strategies must implement.
"""

from abc import ABC, abstractmethod

from ..config import ResolverConfig
from ..model import K8sClusterConfig


class ConfigStrategy(ABC):
    """Abstract base class for cluster config resolution strategies.

    Each strategy (kubeconfig, in-cluster service account) must implement
    this interface.

    Args:
        config: ResolverConfig instance containing resolution options

    Example:
        >>> class StaticStrategy(ConfigStrategy):
        ...     def is_available(self) -> bool:
        ...         return True
        ...
        ...     def resolve(self) -> K8sClusterConfig:
        ...         return cluster_config_from_dict(SETTINGS)
    """

    def __init__(self, config: ResolverConfig) -> None:
        self.config = config

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether this strategy's inputs are present.

        This is a cheap check used for diagnostics and auto-detection. It
        does not guarantee that resolve() succeeds.

        Returns:
            True if strategy inputs are present, False otherwise
        """
        pass

    @abstractmethod
    def resolve(self) -> K8sClusterConfig:
        """Resolve the cluster connection descriptor.

        Returns:
            Immutable K8sClusterConfig

        Raises:
            ClusterConfigError: If resolution fails
        """
        pass

    def get_description(self) -> str:
        """Get human-readable description of this strategy.

        Example:
            >>> strategy.get_description()
            'Kubeconfig (/home/user/.kube/config)'
        """
        return self.__class__.__name__
