"""
Authentication derivation for kubeconfig users.

Turns one kubeconfig user entry into exactly one K8sAuthentication variant.
"""

import logging
from pathlib import Path

from .exceptions import AmbiguousCredentialsError, ValidationError
from .exec_plugin import run_exec_plugin
from .keys import FromString, key_source_from
from .kubeconfig import UserInfo
from .model import BasicAuth, ClientCertificates, K8sAuthentication, ServiceAccountToken

logger = logging.getLogger(__name__)


def get_user_token(user: UserInfo, config_path: str | Path) -> str | None:
    """Return the user's bearer token, running the exec plugin if one is configured.

    An exec section takes precedence over a static ``token`` field.
    """
    if user.exec is not None:
        return run_exec_plugin(user.exec, config_path)
    return user.token


def user_to_authentication(user: UserInfo, config_path: str | Path) -> K8sAuthentication:
    """Derive the authentication method for a kubeconfig user.

    The token is resolved first, so a token obtained from an exec plugin
    is handled exactly like a static one.

    Args:
        user: Kubeconfig user entry
        config_path: Path of the kubeconfig file, used to resolve relative
            exec plugin commands

    Returns:
        ServiceAccountToken, BasicAuth or ClientCertificates

    Raises:
        AmbiguousCredentialsError: If both a token and a username are set
        ValidationError: If a username is set without a password
        ConfigurationAmbiguousError: If a client certificate or key is given
            both as path and as data, or not at all
    """
    token = get_user_token(user, config_path)
    username = user.username

    if token is not None and username is None:
        logger.debug("Using bearer token authentication")
        return ServiceAccountToken(FromString(token))

    if token is None and username is not None:
        if user.password is None:
            raise ValidationError(
                "Username without password in kubeconfig",
                f"User {username!r} has no password"
            )
        logger.debug("Using basic authentication")
        return BasicAuth(username, user.password)

    if token is not None and username is not None:
        raise AmbiguousCredentialsError(
            "Both token and username is provided in kubeconfig",
            "A user entry must use either a token or username/password"
        )

    logger.debug("Using client certificate authentication")
    certificate = key_source_from(user.client_certificate, user.client_certificate_data)
    key = key_source_from(user.client_key, user.client_key_data)
    return ClientCertificates(certificate, key, None)
