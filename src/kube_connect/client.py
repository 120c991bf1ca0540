"""
Hand-off of a resolved cluster config to the kubernetes client.

The kubernetes client reads certificates and keys from files, so key
material that is not already a file is written to private temporary
files which are removed when the interpreter exits. Each distinct key
source gets one file, reused by later calls.
"""

import atexit
import logging
import os
import tempfile

import urllib3
from kubernetes.client import ApiClient, Configuration

from .keys import FromBase64, FromFile, FromString, KeySource, load_key_bytes, load_key_text
from .model import (
    BasicAuth,
    ClientCertificates,
    Insecure,
    K8sClusterConfig,
    Secure,
    ServiceAccountToken,
)

logger = logging.getLogger(__name__)

_temp_files: dict[KeySource, str] = {}


def _cleanup_temp_files() -> None:
    for path in _temp_files.values():
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
    _temp_files.clear()


atexit.register(_cleanup_temp_files)


def key_file_path(source: KeySource) -> str:
    """Return a file path holding the key material."""
    if isinstance(source, FromFile):
        return str(source.path)
    if not isinstance(source, (FromBase64, FromString)):
        raise TypeError(f"Unknown key source: {type(source).__name__}")

    path = _temp_files.get(source)
    if path is not None and os.path.exists(path):
        return path

    data = load_key_bytes(source)
    fd, path = tempfile.mkstemp(prefix="kube-connect-")
    _temp_files[source] = path
    with os.fdopen(fd, "wb") as f:
        f.write(data)
    return path


def to_client_configuration(cluster_config: K8sClusterConfig) -> Configuration:
    """Build a kubernetes client Configuration from a resolved cluster config.

    Tokens are read once, at this point. An exec plugin token is therefore
    used as is until the cluster config is resolved again.

    Args:
        cluster_config: Resolved connection descriptor

    Returns:
        kubernetes.client.Configuration

    Raises:
        NotFoundError: If a key file cannot be opened
        ParseError: If inline key data is malformed
    """
    configuration = Configuration()
    configuration.host = cluster_config.host
    configuration.debug = cluster_config.client.debug

    authentication = cluster_config.authentication
    if isinstance(authentication, ServiceAccountToken):
        token = load_key_text(authentication.token).strip()
        configuration.api_key = {"authorization": f"Bearer {token}"}
    elif isinstance(authentication, BasicAuth):
        configuration.username = authentication.username
        configuration.password = authentication.password
        header = urllib3.util.make_headers(
            basic_auth=f"{authentication.username}:{authentication.password}"
        )
        configuration.api_key = {"authorization": header["authorization"]}
    elif isinstance(authentication, ClientCertificates):
        configuration.cert_file = key_file_path(authentication.certificate)
        configuration.key_file = key_file_path(authentication.key)
        if authentication.password:
            logger.warning("Encrypted client keys are not supported by the kubernetes client")
    else:
        raise TypeError(f"Unknown authentication: {type(authentication).__name__}")

    server_certificate = cluster_config.client.server_certificate
    if isinstance(server_certificate, Insecure):
        logger.warning("SSL verification is disabled")
        configuration.verify_ssl = False
    elif isinstance(server_certificate, Secure):
        configuration.verify_ssl = True
        configuration.ssl_ca_cert = key_file_path(server_certificate.certificate)
        if server_certificate.disable_hostname_verification:
            configuration.assert_hostname = False
    else:
        raise TypeError(f"Unknown server certificate: {type(server_certificate).__name__}")

    return configuration


def to_api_client(cluster_config: K8sClusterConfig) -> ApiClient:
    """Create a kubernetes ApiClient for a resolved cluster config."""
    return ApiClient(configuration=to_client_configuration(cluster_config))
