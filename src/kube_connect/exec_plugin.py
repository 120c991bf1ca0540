"""
Exec credential plugin support.

Runs an external credential provider following the
``client.authentication.k8s.io`` ExecCredential convention and returns the
bearer token it prints. The plugin runs once per resolution: there is no
caching, no refresh scheduling and no retry. The call has no timeout;
wrap the whole resolution if bounded latency is needed.
"""

import json
import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import ParseError, ProcessError, ProtocolError
from .kubeconfig import ExecConfig

logger = logging.getLogger(__name__)


SUPPORTED_API_VERSIONS = frozenset({
    "client.authentication.k8s.io/v1alpha1",
    "client.authentication.k8s.io/v1beta1",
    "client.authentication.k8s.io/v1",
})


@dataclass(frozen=True)
class ExecCredentialStatus:
    token: str = field(repr=False)


@dataclass(frozen=True)
class ExecCredentials:
    """ExecCredential object printed by a plugin on stdout."""

    kind: str
    api_version: str
    status: ExecCredentialStatus

    @classmethod
    def from_json(cls, text: str) -> "ExecCredentials":
        """Parse and validate untrusted plugin output.

        Raises:
            ParseError: If the output is not JSON or lacks a required field
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError("Exec plugin output is not valid JSON", str(e)) from e

        if not isinstance(data, dict):
            raise ParseError("Exec plugin output must be a JSON object")

        status = data.get("status")
        if not isinstance(status, dict):
            raise ParseError("Exec plugin output is missing 'status'")

        fields = {
            "kind": data.get("kind"),
            "apiVersion": data.get("apiVersion"),
            "status.token": status.get("token"),
        }
        for name, value in fields.items():
            if not isinstance(value, str):
                raise ParseError(
                    f"Exec plugin output is missing '{name}'",
                    "Expected a string field"
                )

        return cls(
            kind=data["kind"],
            api_version=data["apiVersion"],
            status=ExecCredentialStatus(token=status["token"]),
        )


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: bytes
    stderr: bytes


def run_command(argv: list[str], env: dict[str, str]) -> CommandResult:
    """Run a command to completion and capture its output.

    Output is returned undecoded.

    Raises:
        OSError: If the executable cannot be launched
    """
    completed = subprocess.run(
        argv,
        env=env,
        stdin=subprocess.DEVNULL,
        capture_output=True,
        check=False,
    )
    return CommandResult(completed.returncode, completed.stdout, completed.stderr)


def resolve_command(command: str, config_path: str | Path) -> str:
    """Resolve the plugin executable.

    A command containing a path separator that is not absolute is taken
    relative to the directory of the kubeconfig file, not the current
    working directory. If KUBECONFIG is /home/user/kubeconfig and the
    command is ./bin/plugin, /home/user/bin/plugin is executed. Bare
    command names are left for PATH lookup.
    """
    if os.sep in command and not os.path.isabs(command):
        config_dir = os.path.dirname(os.path.abspath(config_path))
        return os.path.normpath(os.path.join(config_dir, command))
    return command


def build_environment(exec_config: ExecConfig) -> dict[str, str]:
    """Environment for the plugin: the current environment plus the exec env entries."""
    env = dict(os.environ)
    env.update({entry.name: entry.value for entry in exec_config.env})
    return env


def run_exec_plugin(exec_config: ExecConfig, config_path: str | Path) -> str:
    """Run the exec credential plugin and return the token it produced.

    Args:
        exec_config: The user's exec section
        config_path: Path of the kubeconfig file the exec section came from

    Returns:
        Bearer token from ``status.token``

    Raises:
        ProcessError: If the plugin cannot be launched or exits non-zero
        ParseError: If the plugin output is not a valid ExecCredential
        ProtocolError: If the API version is unsupported or does not match
    """
    command = resolve_command(exec_config.command, config_path)
    argv = [command, *exec_config.args]
    logger.debug(f"Running exec credential plugin: {command}")

    try:
        result = run_command(argv, build_environment(exec_config))
    except OSError as e:
        raise ProcessError(
            f"Failed to run exec credential plugin {command}",
            f"Error: {type(e).__name__}: {str(e)}",
            install_hint=exec_config.install_hint,
        ) from e

    if result.returncode != 0:
        raise ProcessError(
            f"Exec credential plugin {command} exited with status {result.returncode}",
            result.stderr.decode("utf-8", errors="replace").strip() or None,
            install_hint=exec_config.install_hint,
        )

    try:
        output = result.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(
            f"Exec credential plugin {command} output is not valid text",
            f"Error: {type(e).__name__}: {str(e)}"
        ) from e

    credentials = ExecCredentials.from_json(output)

    if credentials.api_version not in SUPPORTED_API_VERSIONS:
        raise ProtocolError(
            f"Unsupported client.authentication api version: {credentials.api_version}",
            f"Supported versions: {', '.join(sorted(SUPPORTED_API_VERSIONS))}"
        )

    if credentials.api_version != exec_config.api_version:
        raise ProtocolError(
            f"Credentials api version: {credentials.api_version} doesn't match "
            f"exec config api version: {exec_config.api_version}"
        )

    logger.debug(f"Exec credential plugin returned a {credentials.api_version} token")
    return credentials.status.token
