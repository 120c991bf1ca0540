"""
Cluster connection descriptor.

This module holds the immutable value produced by a resolution: the API
server URI, the authentication method and the TLS trust policy. An HTTP
transport consumes it (see ``kube_connect.client``).
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import urlsplit, urlunsplit

from .exceptions import ConfigurationAmbiguousError, ParseError
from .keys import FromBase64, FromFile, FromString, KeySource, key_source_from

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceAccountToken:
    """Authenticate with a bearer token.

    Args:
        token: Key source pointing to a token file, or a raw token value
    """

    token: KeySource


@dataclass(frozen=True)
class BasicAuth:
    """Authenticate with basic authentication."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r}, password=***REDACTED***)"


@dataclass(frozen=True)
class ClientCertificates:
    """Authenticate with X509 client certificates.

    Args:
        certificate: Client certificate
        key: Client's private key
        password: Passphrase for the key if needed
    """

    certificate: KeySource
    key: KeySource
    password: str | None = None

    def __repr__(self) -> str:
        password = "***REDACTED***" if self.password else None
        return (
            f"ClientCertificates(certificate={self.certificate!r}, "
            f"key={self.key!r}, password={password})"
        )


K8sAuthentication = Union[ServiceAccountToken, BasicAuth, ClientCertificates]


@dataclass(frozen=True)
class Insecure:
    """Skip server certificate verification. Only meant for testing."""


@dataclass(frozen=True)
class Secure:
    """Verify the server against a CA certificate.

    Args:
        certificate: CA certificate the server must chain to
        disable_hostname_verification: Skip matching the certificate to the host
    """

    certificate: KeySource
    disable_hostname_verification: bool = False


K8sServerCertificate = Union[Insecure, Secure]


@dataclass(frozen=True)
class K8sClientConfig:
    """HTTP connection settings towards the Kubernetes API.

    Args:
        debug: Enables detailed request/response logging in the transport
        server_certificate: Server trust policy
    """

    debug: bool
    server_certificate: K8sServerCertificate


@dataclass(frozen=True)
class K8sClusterConfig:
    """Everything needed to connect to one Kubernetes API server.

    Args:
        host: Absolute URI of the Kubernetes API
        authentication: Authentication method to use
        client: HTTP client configuration

    Example:
        >>> config = K8sClusterConfig(
        ...     host="https://kubernetes.default.svc",
        ...     authentication=ServiceAccountToken(FromString("abc")),
        ...     client=K8sClientConfig(False, Insecure()),
        ... )
    """

    host: str
    authentication: K8sAuthentication
    client: K8sClientConfig

    def drop_trailing_dot(self) -> "K8sClusterConfig":
        """Return a copy with the trailing dot removed from the host name.

        Kubeconfig files sometimes contain fully qualified host names such as
        ``api.example.com.`` which TLS hostname verification does not accept.
        Use this together with ``Secure.disable_hostname_verification``.
        """
        parts = urlsplit(self.host)
        userinfo, at, hostport = parts.netloc.rpartition("@")
        if hostport.startswith("["):
            return self

        hostname, colon, port = hostport.partition(":")
        if not hostname.endswith("."):
            return self

        netloc = f"{userinfo}{at}{hostname.rstrip('.')}{colon}{port}"
        return dataclasses.replace(self, host=urlunsplit(parts._replace(netloc=netloc)))


def parse_server_uri(server: str) -> str:
    """Validate that ``server`` is an absolute URI and return it.

    Raises:
        ParseError: If the URI has no scheme or host, or an invalid port
    """
    try:
        parts = urlsplit(server)
        # Accessing port validates it
        parts.port
    except ValueError as e:
        raise ParseError(f"Failed to parse host URL: {server}", str(e)) from e

    if not parts.scheme or not parts.hostname:
        raise ParseError(
            f"Failed to parse host URL: {server}",
            "The server must be an absolute URI such as https://host:6443"
        )
    return server


def _key_source_from_dict(data: Any, what: str) -> KeySource:
    if not isinstance(data, dict):
        raise ParseError(f"Invalid key source for {what}", f"Expected a mapping, got: {data!r}")

    present = [name for name in ("path", "base64", "value") if data.get(name) is not None]
    if not present:
        raise ConfigurationAmbiguousError(
            f"Missing configuration for {what}",
            "One of 'path', 'base64' or 'value' is required"
        )
    if len(present) > 1:
        raise ConfigurationAmbiguousError(
            f"Ambiguous configuration for {what}",
            f"Only one of {', '.join(present)} may be set"
        )

    if "value" in present:
        return FromString(str(data["value"]))
    return key_source_from(data.get("path"), data.get("base64"))


def _authentication_from_dict(data: Any) -> K8sAuthentication:
    if not isinstance(data, dict) or len(data) != 1:
        raise ConfigurationAmbiguousError(
            "Authentication must name exactly one method",
            "Use one of: service-account-token, basic-auth, client-certificates"
        )

    method, body = next(iter(data.items()))
    if method == "service-account-token":
        return ServiceAccountToken(_key_source_from_dict(body, "service-account-token"))

    if not isinstance(body, dict):
        raise ParseError(f"Invalid {method} authentication", f"Expected a mapping, got: {body!r}")

    if method == "basic-auth":
        try:
            return BasicAuth(username=str(body["username"]), password=str(body["password"]))
        except KeyError as e:
            raise ParseError("Invalid basic-auth authentication", f"Missing field: {e}") from e
    if method == "client-certificates":
        return ClientCertificates(
            certificate=_key_source_from_dict(body.get("certificate"), "client certificate"),
            key=_key_source_from_dict(body.get("key"), "client key"),
            password=body.get("password"),
        )

    raise ParseError(f"Unknown authentication method: {method}")


def _server_certificate_from_dict(data: Any) -> K8sServerCertificate:
    if data == "insecure":
        logger.warning("Server certificate verification is disabled by configuration")
        return Insecure()

    if isinstance(data, dict) and isinstance(data.get("secure"), dict):
        secure = data["secure"]
        return Secure(
            certificate=_key_source_from_dict(secure.get("certificate"), "server certificate"),
            disable_hostname_verification=bool(
                secure.get("disable-hostname-verification", False)
            ),
        )

    raise ParseError(
        "Invalid server-certificate configuration",
        "Expected 'insecure' or a mapping with a 'secure' section"
    )


def cluster_config_from_dict(data: dict) -> K8sClusterConfig:
    """Build a K8sClusterConfig from plain configuration data.

    This is useful for providing the connection explicitly from a YAML or
    JSON settings file instead of a kubeconfig.

    Args:
        data: Mapping with ``host``, ``authentication`` and ``client`` keys

    Returns:
        K8sClusterConfig instance

    Raises:
        ParseError: If a field is missing or malformed
        ConfigurationAmbiguousError: If a choice is given zero or several times

    Example:
        >>> config = cluster_config_from_dict({
        ...     "host": "https://10.0.0.1:6443",
        ...     "authentication": {"service-account-token": {"path": "/tmp/token"}},
        ...     "client": {"server-certificate": {"secure": {
        ...         "certificate": {"path": "/tmp/ca.crt"}}}},
        ... })
    """
    if not isinstance(data, dict):
        raise ParseError("Cluster configuration must be a mapping")

    try:
        host = data["host"]
        authentication = data["authentication"]
        client = data["client"]
    except KeyError as e:
        raise ParseError("Invalid cluster configuration", f"Missing field: {e}") from e

    if not isinstance(client, dict) or "server-certificate" not in client:
        raise ParseError("Invalid client configuration", "Missing field: 'server-certificate'")

    return K8sClusterConfig(
        host=parse_server_uri(str(host)),
        authentication=_authentication_from_dict(authentication),
        client=K8sClientConfig(
            debug=bool(client.get("debug", False)),
            server_certificate=_server_certificate_from_dict(client["server-certificate"]),
        ),
    )


__all__ = [
    "BasicAuth",
    "ClientCertificates",
    "FromBase64",
    "FromFile",
    "FromString",
    "Insecure",
    "K8sAuthentication",
    "K8sClientConfig",
    "K8sClusterConfig",
    "K8sServerCertificate",
    "Secure",
    "ServiceAccountToken",
    "cluster_config_from_dict",
    "parse_server_uri",
]
