"""
Tests for authentication derivation.

Tests cover:
- Token, basic auth and client certificate users
- Invalid credential combinations
- Exec plugin tokens taking the token path
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from kube_connect.credentials import get_user_token, user_to_authentication
from kube_connect.exceptions import (
    AmbiguousCredentialsError,
    ConfigurationAmbiguousError,
    ValidationError,
)
from kube_connect.keys import FromBase64, FromFile, FromString
from kube_connect.kubeconfig import ExecConfig, UserInfo
from kube_connect.model import BasicAuth, ClientCertificates, ServiceAccountToken

CONFIG_PATH = Path("/home/user/.kube/config")
EXEC = ExecConfig(api_version="client.authentication.k8s.io/v1beta1", command="plugin")


class TestUserToAuthentication:
    """Test deriving an authentication method from a user entry."""

    def test_token(self):
        auth = user_to_authentication(UserInfo(token="abc"), CONFIG_PATH)

        assert auth == ServiceAccountToken(FromString("abc"))

    def test_basic_auth(self):
        auth = user_to_authentication(UserInfo(username="admin", password="secret"), CONFIG_PATH)

        assert auth == BasicAuth("admin", "secret")

    def test_username_without_password(self):
        with pytest.raises(ValidationError) as exc_info:
            user_to_authentication(UserInfo(username="admin"), CONFIG_PATH)

        assert "Username without password" in str(exc_info.value)

    def test_token_and_username(self):
        """Test both a token and a username is rejected."""
        user = UserInfo(token="abc", username="admin", password="secret")

        with pytest.raises(AmbiguousCredentialsError) as exc_info:
            user_to_authentication(user, CONFIG_PATH)

        assert isinstance(exc_info.value, ConfigurationAmbiguousError)
        assert isinstance(exc_info.value, ValidationError)
        assert "Both token and username" in str(exc_info.value)

    def test_client_certificates_from_files(self):
        user = UserInfo(client_certificate="/tls/cert.pem", client_key="/tls/key.pem")

        auth = user_to_authentication(user, CONFIG_PATH)

        assert auth == ClientCertificates(
            FromFile(Path("/tls/cert.pem")), FromFile(Path("/tls/key.pem")), None
        )

    def test_client_certificates_mixed_sources(self):
        user = UserInfo(client_certificate_data="Y2VydA==", client_key="/tls/key.pem")

        auth = user_to_authentication(user, CONFIG_PATH)

        assert auth == ClientCertificates(
            FromBase64("Y2VydA=="), FromFile(Path("/tls/key.pem")), None
        )

    def test_client_key_missing(self):
        with pytest.raises(ConfigurationAmbiguousError) as exc_info:
            user_to_authentication(UserInfo(client_certificate="/tls/cert.pem"), CONFIG_PATH)

        assert "Missing configuration" in str(exc_info.value)

    def test_client_certificate_ambiguous(self):
        user = UserInfo(
            client_certificate="/tls/cert.pem",
            client_certificate_data="Y2VydA==",
            client_key="/tls/key.pem",
        )

        with pytest.raises(ConfigurationAmbiguousError) as exc_info:
            user_to_authentication(user, CONFIG_PATH)

        assert "Ambiguous configuration" in str(exc_info.value)

    def test_empty_user(self):
        """Test a user without any credentials has no client certificate."""
        with pytest.raises(ConfigurationAmbiguousError):
            user_to_authentication(UserInfo(), CONFIG_PATH)


class TestExecTokens:
    """Test exec plugin tokens flowing into authentication."""

    @patch("kube_connect.credentials.run_exec_plugin", return_value="abc")
    def test_exec_token(self, mock_run):
        auth = user_to_authentication(UserInfo(exec=EXEC), CONFIG_PATH)

        assert auth == ServiceAccountToken(FromString("abc"))
        mock_run.assert_called_once_with(EXEC, CONFIG_PATH)

    @patch("kube_connect.credentials.run_exec_plugin", return_value="from-plugin")
    def test_exec_takes_precedence_over_static_token(self, mock_run):
        assert get_user_token(UserInfo(token="static", exec=EXEC), CONFIG_PATH) == "from-plugin"

    @patch("kube_connect.credentials.run_exec_plugin", return_value="abc")
    def test_exec_token_with_username(self, mock_run):
        user = UserInfo(exec=EXEC, username="admin", password="secret")

        with pytest.raises(AmbiguousCredentialsError):
            user_to_authentication(user, CONFIG_PATH)

    def test_static_token_without_exec(self):
        assert get_user_token(UserInfo(token="static"), CONFIG_PATH) == "static"

    def test_no_token(self):
        assert get_user_token(UserInfo(), CONFIG_PATH) is None
