"""
kube-connect: Kubernetes cluster connection resolution.

Resolves how a Kubernetes API client connects and authenticates, from a
kubeconfig file or the in-cluster service account, into one immutable
K8sClusterConfig: endpoint, authentication method and TLS trust policy.

Quick Start:
    >>> from kube_connect import resolve_cluster_config
    >>>
    >>> # Kubeconfig if usable, otherwise the in-cluster service account
    >>> cluster = resolve_cluster_config()
    >>> cluster.host
    'https://127.0.0.1:6443'

With the kubernetes client:
    >>> from kube_connect import get_k8s_client, ResolverConfig
    >>> from kubernetes import client
    >>>
    >>> api_client = get_k8s_client(ResolverConfig(context="staging"))
    >>> v1 = client.CoreV1Api(api_client)
"""

import logging

# Public API
from .client import to_api_client, to_client_configuration
from .config import ResolverConfig, SecurityWarning
from .exceptions import (
    AmbiguousCredentialsError,
    ClusterConfigError,
    ConfigurationAmbiguousError,
    ConfigurationError,
    NotFoundError,
    ParseError,
    ProcessError,
    ProtocolError,
    ValidationError,
)
from .factory import get_k8s_client, resolve_cluster_config
from .keys import (
    FromBase64,
    FromFile,
    FromString,
    KeySource,
    key_source_from,
    load_key_text,
    open_key_stream,
)
from .model import (
    BasicAuth,
    ClientCertificates,
    Insecure,
    K8sAuthentication,
    K8sClientConfig,
    K8sClusterConfig,
    K8sServerCertificate,
    Secure,
    ServiceAccountToken,
    cluster_config_from_dict,
)

# Version
__version__ = "0.1.0"

# Public exports
__all__ = [
    # Main functions
    "resolve_cluster_config",
    "get_k8s_client",
    "to_api_client",
    "to_client_configuration",
    "cluster_config_from_dict",
    # Configuration
    "ResolverConfig",
    "SecurityWarning",
    # Descriptor
    "K8sClusterConfig",
    "K8sClientConfig",
    "K8sAuthentication",
    "ServiceAccountToken",
    "BasicAuth",
    "ClientCertificates",
    "K8sServerCertificate",
    "Insecure",
    "Secure",
    # Key material
    "KeySource",
    "FromFile",
    "FromBase64",
    "FromString",
    "key_source_from",
    "open_key_stream",
    "load_key_text",
    # Exceptions
    "ClusterConfigError",
    "ConfigurationError",
    "ConfigurationAmbiguousError",
    "NotFoundError",
    "ParseError",
    "ProcessError",
    "ProtocolError",
    "ValidationError",
    "AmbiguousCredentialsError",
    # Version
    "__version__",
]

# Configure logging
# Users can configure the logger in their own code:
#   import logging
#   logging.getLogger("kube_connect").setLevel(logging.DEBUG)
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())  # Avoid "No handler" warnings
