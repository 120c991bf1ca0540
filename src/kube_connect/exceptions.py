"""
Custom exceptions for the kube-connect library.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from ClusterConfigError, making it easy to catch
any error raised while resolving a cluster connection.
"""


class ClusterConfigError(Exception):
    """Base exception for all cluster configuration errors.

    This is the base class for all exceptions raised by this library.
    Catching this exception will catch all resolution errors.

    Args:
        message: Human-readable error message
        details: Optional additional details about the error
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


class ConfigurationError(ClusterConfigError):
    """Resolver configuration is invalid.

    Raised when the provided ResolverConfig contains invalid values.

    Example:
        >>> config = ResolverConfig(method="oidc")
        >>> # Raises: ConfigurationError("Invalid resolution method: oidc")
    """
    pass


class ConfigurationAmbiguousError(ClusterConfigError):
    """A mutually exclusive pair of settings is both set, or neither is.

    Example:
        >>> key_source_from("/tmp/ca.crt", "LS0tLS1...")
        >>> # Raises: ConfigurationAmbiguousError("Ambiguous configuration, ...")
    """
    pass


class NotFoundError(ClusterConfigError):
    """A kubeconfig file, context, cluster or user could not be found."""
    pass


class ParseError(ClusterConfigError):
    """Malformed kubeconfig content, server URI, key data or plugin output."""
    pass


class ProcessError(ClusterConfigError):
    """An exec credential plugin failed to launch or exited with an error.

    Args:
        message: Human-readable error message
        details: Optional additional details (e.g. the plugin's stderr)
        install_hint: The exec config's installHint, shown as remediation
    """

    def __init__(
        self,
        message: str,
        details: str | None = None,
        install_hint: str | None = None,
    ) -> None:
        self.install_hint = install_hint
        super().__init__(message, details)

    def __str__(self) -> str:
        text = super().__str__()
        if self.install_hint:
            return f"{text}\n{self.install_hint}"
        return text


class ProtocolError(ClusterConfigError):
    """An exec credential plugin answered with an unusable API version."""
    pass


class ValidationError(ClusterConfigError):
    """A kubeconfig user entry holds an invalid combination of credentials."""
    pass


class AmbiguousCredentialsError(ConfigurationAmbiguousError, ValidationError):
    """A kubeconfig user entry sets both a token and a username."""
    pass
