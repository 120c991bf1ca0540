"""
Configuration dataclass for cluster config resolution.

This module provides the ResolverConfig dataclass that centralizes the
options controlling how a cluster connection is resolved.
"""

import os
import warnings
from dataclasses import dataclass

from .exceptions import ConfigurationError


@dataclass
class ResolverConfig:
    """Options for resolving a Kubernetes cluster connection.

    Args:
        method: Resolution method to use. Options:
            - "auto": Try kubeconfig, fall back to the service account (default)
            - "kubeconfig": Use KUBECONFIG or ~/.kube/config only
            - "serviceaccount": Use the in-cluster service account only
        context: Kubeconfig context to use instead of the file's current-context
        kubeconfig_path: Path to kubeconfig file (overrides KUBECONFIG env var)
        debug: Enable request/response logging in the HTTP transport
        disable_hostname_verification: Skip matching the server certificate to
            the host name (WARNING: weakens TLS)
        drop_trailing_dot: Strip a trailing dot from the resolved host name

    Example:
        >>> # Default chain (simplest)
        >>> config = ResolverConfig()
        >>>
        >>> # Pin a context from a specific file
        >>> config = ResolverConfig(
        ...     method="kubeconfig",
        ...     kubeconfig_path="/etc/ci/kubeconfig",
        ...     context="staging",
        ... )
    """

    method: str = "auto"
    context: str | None = None
    kubeconfig_path: str | None = None
    debug: bool = False
    disable_hostname_verification: bool = False
    drop_trailing_dot: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        self._load_from_environment()

        self.method = self.method.lower()

        valid_methods = {"auto", "kubeconfig", "serviceaccount"}
        if self.method not in valid_methods:
            raise ConfigurationError(
                f"Invalid resolution method: {self.method}",
                f"Valid methods are: {', '.join(sorted(valid_methods))}"
            )

        if self.context is not None and not self.context.strip():
            raise ConfigurationError(
                "Context override must not be empty",
                "Omit context to use the kubeconfig's current-context"
            )

        if self.disable_hostname_verification:
            warnings.warn(
                "TLS hostname verification is disabled (disable_hostname_verification=True). "
                "The server certificate is still checked against the CA, but not against "
                "the host name.",
                SecurityWarning,
                stacklevel=2
            )

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables.

        Environment Variables:
            KUBE_CONTEXT: Kubeconfig context override

        An empty KUBE_CONTEXT counts as unset.

        KUBECONFIG is deliberately read at resolution time instead, so a
        config object can be reused after the environment changes.
        """
        if not self.context:
            self.context = os.getenv("KUBE_CONTEXT") or None

    def __repr__(self) -> str:
        """Return string representation listing only the fields that are set."""
        config_dict = {
            "method": self.method,
            "context": self.context,
            "kubeconfig_path": self.kubeconfig_path,
            "debug": self.debug or None,
            "disable_hostname_verification": self.disable_hostname_verification or None,
            "drop_trailing_dot": self.drop_trailing_dot or None,
        }

        params = ", ".join(f"{k}={v!r}" for k, v in config_dict.items() if v is not None)
        return f"ResolverConfig({params})"

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ResolverConfig":
        """Create ResolverConfig from dictionary.

        Unknown keys are ignored.

        Example:
            >>> config = ResolverConfig.from_dict({"method": "kubeconfig", "context": "dev"})
        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_dict = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered_dict)


class SecurityWarning(UserWarning):
    """Warning category for security-related issues.

    This custom warning category allows users to filter security warnings
    separately from other warnings if desired.
    """
    pass
