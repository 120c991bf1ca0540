"""
Kubeconfig file model.

Parses the clusters, users and contexts sections of a kubeconfig file
into plain dataclasses. A kubeconfig is parsed fresh on every resolution;
nothing here is cached.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import NotFoundError, ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecEnv:
    """Environment variable passed to an exec credential plugin."""

    name: str
    value: str


@dataclass(frozen=True)
class ExecConfig:
    """The ``exec`` section of a kubeconfig user.

    Args:
        api_version: client.authentication.k8s.io version the plugin speaks
        command: Executable to run
        args: Arguments passed to the executable
        env: Extra environment variables, in declaration order, without duplicates
        install_hint: Text shown to the user when the executable cannot run
    """

    api_version: str
    command: str
    args: tuple[str, ...] = ()
    env: tuple[ExecEnv, ...] = ()
    install_hint: str | None = None


@dataclass(frozen=True)
class ClusterInfo:
    server: str
    certificate_authority: str | None = None
    certificate_authority_data: str | None = None
    insecure_skip_tls_verify: bool = False


@dataclass(frozen=True)
class UserInfo:
    token: str | None = field(default=None, repr=False)
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    client_certificate: str | None = None
    client_certificate_data: str | None = field(default=None, repr=False)
    client_key: str | None = None
    client_key_data: str | None = field(default=None, repr=False)
    exec: ExecConfig | None = None


@dataclass(frozen=True)
class ContextInfo:
    cluster: str
    user: str


@dataclass(frozen=True)
class Kubeconfig:
    """Parsed kubeconfig file.

    Args:
        cluster_map: Cluster entries by name
        user_map: User entries by name
        context_map: Context entries by name
        current_context: Name of the context selected by the file itself
    """

    cluster_map: dict[str, ClusterInfo]
    user_map: dict[str, UserInfo]
    context_map: dict[str, ContextInfo]
    current_context: str | None = None

    @property
    def current_context_info(self) -> ContextInfo | None:
        if self.current_context is None:
            return None
        return self.context_map.get(self.current_context)

    @classmethod
    def load(cls, path: str | Path) -> "Kubeconfig":
        """Read and parse a kubeconfig file.

        Args:
            path: Path to the kubeconfig file

        Returns:
            Kubeconfig instance

        Raises:
            NotFoundError: If the file cannot be read
            ParseError: If the content is not a valid kubeconfig
        """
        logger.debug(f"Loading kubeconfig from {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise NotFoundError(
                f"Cannot read kubeconfig {path}",
                f"Error: {type(e).__name__}: {str(e)}"
            ) from e
        except yaml.YAMLError as e:
            raise ParseError(f"Kubeconfig {path} is not valid YAML", str(e)) from e

        try:
            return cls.from_dict(data)
        except ParseError as e:
            raise ParseError(f"Invalid kubeconfig {path}: {e.message}", e.details) from e

    @classmethod
    def from_dict(cls, data: Any) -> "Kubeconfig":
        """Build a Kubeconfig from already parsed YAML data.

        Raises:
            ParseError: If required fields are missing or have the wrong type
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParseError("Kubeconfig must be a mapping", f"Got: {type(data).__name__}")

        current_context = _optional_str(data, "current-context", "kubeconfig") or None
        return cls(
            cluster_map=_named_entries(data, "clusters", "cluster", _parse_cluster),
            user_map=_named_entries(data, "users", "user", _parse_user),
            context_map=_named_entries(data, "contexts", "context", _parse_context),
            current_context=current_context,
        )


def _named_entries(data: dict, section: str, key: str, parse) -> dict:
    entries = data.get(section) or []
    if not isinstance(entries, list):
        raise ParseError(f"'{section}' must be a list")

    result = {}
    for entry in entries:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise ParseError(f"Every entry in '{section}' needs a 'name'", f"Entry: {entry!r}")
        name = entry["name"]
        body = entry.get(key)
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ParseError(f"'{key}' of {section[:-1]} {name} must be a mapping")
        if name in result:
            logger.debug(f"Ignoring duplicate {section[:-1]} entry: {name}")
            continue
        result[name] = parse(body, f"{section[:-1]} {name}")
    return result


def _optional_str(body: dict, key: str, where: str) -> str | None:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParseError(f"'{key}' of {where} must be a string", f"Got: {value!r}")
    return value


def _required_str(body: dict, key: str, where: str) -> str:
    value = _optional_str(body, key, where)
    if value is None:
        raise ParseError(f"{where} is missing required field '{key}'")
    return value


def _optional_bool(body: dict, key: str, where: str) -> bool:
    value = body.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ParseError(f"'{key}' of {where} must be a boolean", f"Got: {value!r}")
    return value


def _parse_cluster(body: dict, where: str) -> ClusterInfo:
    return ClusterInfo(
        server=_required_str(body, "server", where),
        certificate_authority=_optional_str(body, "certificate-authority", where),
        certificate_authority_data=_optional_str(body, "certificate-authority-data", where),
        insecure_skip_tls_verify=_optional_bool(body, "insecure-skip-tls-verify", where),
    )


def _parse_exec(body: Any, where: str) -> ExecConfig:
    if not isinstance(body, dict):
        raise ParseError(f"'exec' of {where} must be a mapping")

    args = body.get("args") or []
    if not isinstance(args, list) or not all(isinstance(arg, str) for arg in args):
        raise ParseError(f"'args' of {where} exec must be a list of strings", f"Got: {args!r}")

    env: list[ExecEnv] = []
    for item in body.get("env") or []:
        if not isinstance(item, dict):
            raise ParseError(f"'env' entries of {where} exec must be mappings", f"Got: {item!r}")
        entry = ExecEnv(
            name=_required_str(item, "name", f"{where} exec env"),
            value=_required_str(item, "value", f"{where} exec env"),
        )
        if entry not in env:
            env.append(entry)

    return ExecConfig(
        api_version=_required_str(body, "apiVersion", f"{where} exec"),
        command=_required_str(body, "command", f"{where} exec"),
        args=tuple(args),
        env=tuple(env),
        install_hint=_optional_str(body, "installHint", f"{where} exec"),
    )


def _parse_user(body: dict, where: str) -> UserInfo:
    exec_body = body.get("exec")
    return UserInfo(
        token=_optional_str(body, "token", where),
        username=_optional_str(body, "username", where),
        password=_optional_str(body, "password", where),
        client_certificate=_optional_str(body, "client-certificate", where),
        client_certificate_data=_optional_str(body, "client-certificate-data", where),
        client_key=_optional_str(body, "client-key", where),
        client_key_data=_optional_str(body, "client-key-data", where),
        exec=_parse_exec(exec_body, where) if exec_body is not None else None,
    )


def _parse_context(body: dict, where: str) -> ContextInfo:
    return ContextInfo(
        cluster=_required_str(body, "cluster", where),
        user=_required_str(body, "user", where),
    )
