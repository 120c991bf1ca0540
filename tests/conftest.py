"""
Shared pytest fixtures for testing.

This module provides reusable fixtures for mocking kubeconfig files,
service account mounts and exec credential plugins.
"""

import json
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import yaml

CA_DATA = "LS0tLS1CRUdJTiBDRVJUSUZJQ0FURS0tLS0t"


def build_kubeconfig(
    user: dict,
    *,
    cluster: dict | None = None,
    current_context: str | None = "test-context",
) -> dict:
    """Build a kubeconfig document with one cluster, one user and two contexts.

    "test-context" pairs test-cluster with test-user, "other-context" pairs
    other-cluster with other-user (a static token user).
    """
    if cluster is None:
        cluster = {
            "certificate-authority-data": CA_DATA,
            "server": "https://127.0.0.1:6443",
        }
    document = {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [
            {"name": "test-cluster", "cluster": cluster},
            {
                "name": "other-cluster",
                "cluster": {
                    "certificate-authority": "/etc/other/ca.crt",
                    "server": "https://other.example.com:443",
                },
            },
        ],
        "contexts": [
            {"name": "test-context", "context": {"cluster": "test-cluster", "user": "test-user"}},
            {"name": "other-context", "context": {"cluster": "other-cluster", "user": "other-user"}},
        ],
        "users": [
            {"name": "test-user", "user": user},
            {"name": "other-user", "user": {"token": "other-token"}},
        ],
    }
    if current_context is not None:
        document["current-context"] = current_context
    return document


@pytest.fixture
def mock_kubeconfig(tmp_path: Path) -> Path:
    """Create a mock kubeconfig file.

    Args:
        tmp_path: pytest temporary directory

    Returns:
        Path to the temporary kubeconfig file

    Example:
        >>> def test_kubeconfig(mock_kubeconfig):
        ...     assert mock_kubeconfig.exists()
    """
    kubeconfig_content = f"""
apiVersion: v1
kind: Config
clusters:
- cluster:
    certificate-authority-data: {CA_DATA}
    server: https://127.0.0.1:6443
  name: test-cluster
contexts:
- context:
    cluster: test-cluster
    user: test-user
  name: test-context
current-context: test-context
users:
- name: test-user
  user:
    token: test-token-12345
"""
    kubeconfig_path = tmp_path / "config"
    kubeconfig_path.write_text(kubeconfig_content)
    return kubeconfig_path


@pytest.fixture
def kubeconfig_builder() -> Callable[..., dict]:
    """Return build_kubeconfig() for tests that need the raw document."""
    return build_kubeconfig


@pytest.fixture
def kubeconfig_factory(tmp_path: Path) -> Callable[..., Path]:
    """Write kubeconfig files built with build_kubeconfig().

    Example:
        >>> def test_basic(kubeconfig_factory):
        ...     path = kubeconfig_factory({"username": "admin", "password": "secret"})
    """

    def write(user: dict, *, path: Path | None = None, **kwargs) -> Path:
        if path is None:
            path = tmp_path / "kubeconfig"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(build_kubeconfig(user, **kwargs)))
        return path

    return write


@pytest.fixture
def exec_plugin_factory() -> Callable[..., Path]:
    """Write executable fake exec credential plugins.

    The plugin prints ``stdout`` (raw bytes, or the JSON encoding of a dict), writes
    ``stderr`` and exits with ``exit_code``. When ``token_env`` is given the
    plugin prints a v1beta1 ExecCredential whose token is read from that
    environment variable, followed by its arguments.

    Example:
        >>> def test_plugin(exec_plugin_factory, tmp_path):
        ...     plugin = exec_plugin_factory(tmp_path / "plugin", stdout={"kind": "ExecCredential"})
    """

    def write(
        path: Path,
        *,
        stdout: str | bytes | dict = "",
        stderr: str = "",
        exit_code: int = 0,
        token_env: str | None = None,
    ) -> Path:
        if isinstance(stdout, dict):
            stdout = json.dumps(stdout)
        stream = "sys.stdout.buffer" if isinstance(stdout, bytes) else "sys.stdout"

        if token_env is not None:
            body = (
                "import json, os\n"
                "print(json.dumps({\n"
                '    "kind": "ExecCredential",\n'
                '    "apiVersion": "client.authentication.k8s.io/v1beta1",\n'
                f'    "status": {{"token": os.environ[{token_env!r}] + "|" + "|".join(sys.argv[1:])}},\n'
                "}))\n"
            )
        else:
            body = (
                f"{stream}.write({stdout!r})\n"
                f"sys.stderr.write({stderr!r})\n"
                f"sys.exit({exit_code})\n"
            )

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!{sys.executable}\nimport sys\n{body}")
        path.chmod(0o755)
        return path

    return write


@pytest.fixture
def exec_credential() -> Callable[..., dict]:
    """Build ExecCredential plugin responses."""

    def build(token: str = "abc", version: str = "v1beta1") -> dict:
        return {
            "kind": "ExecCredential",
            "apiVersion": f"client.authentication.k8s.io/{version}",
            "status": {"token": token},
        }

    return build


@pytest.fixture
def mock_service_account(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create mock service account files for in-cluster resolution.

    Creates the standard Kubernetes service account directory structure and
    patches the hardcoded paths in the serviceaccount strategy.

    Returns:
        Path to the mock service account directory
    """
    sa_path = tmp_path / "var" / "run" / "secrets" / "kubernetes.io" / "serviceaccount"
    sa_path.mkdir(parents=True)

    token_path = sa_path / "token"
    token_path.write_text("test-sa-token-content")

    ca_path = sa_path / "ca.crt"
    ca_path.write_text(
        "-----BEGIN CERTIFICATE-----\n"
        "test-certificate-data\n"
        "-----END CERTIFICATE-----"
    )

    namespace_path = sa_path / "namespace"
    namespace_path.write_text("default")

    monkeypatch.setattr("kube_connect.strategies.serviceaccount.TOKEN_PATH", token_path)
    monkeypatch.setattr("kube_connect.strategies.serviceaccount.CA_CERT_PATH", ca_path)
    monkeypatch.setattr("kube_connect.strategies.serviceaccount.NAMESPACE_PATH", namespace_path)

    return sa_path


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear all resolution-related environment variables.

    This ensures tests start with a clean slate and don't inherit
    environment variables from the test runner's environment.
    """
    env_vars = [
        "KUBECONFIG",
        "KUBE_CONTEXT",
        "KUBERNETES_SERVICE_HOST",
        "KUBERNETES_SERVICE_PORT",
    ]

    for var in env_vars:
        monkeypatch.delenv(var, raising=False)

    yield


@pytest.fixture
def unknown_home(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make the home directory impossible to determine."""

    def no_home():
        raise RuntimeError("Could not determine home directory.")

    monkeypatch.setattr(Path, "home", no_home)


# Pytest markers for different test levels
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't spawn processes"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that run real plugin processes"
    )
