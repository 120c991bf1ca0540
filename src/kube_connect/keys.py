"""
Key material sources.

A KeySource describes where a certificate, private key or token lives
without reading it. The bytes are only materialized inside a scoped
stream, so callers never special-case files against inline data.
"""

import base64
import binascii
import io
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

from .exceptions import ConfigurationAmbiguousError, NotFoundError, ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FromFile:
    """Key loaded from an external file."""

    path: Path


@dataclass(frozen=True)
class FromBase64:
    """Key loaded from a base64 encoded string."""

    base64: str

    def __repr__(self) -> str:
        return "FromBase64(base64=***REDACTED***)"


@dataclass(frozen=True)
class FromString:
    """Key given as a plain string (e.g. a bearer token)."""

    value: str

    def __repr__(self) -> str:
        return "FromString(value=***REDACTED***)"


KeySource = Union[FromFile, FromBase64, FromString]


def key_source_from(maybe_path: str | None, maybe_base64: str | None) -> KeySource:
    """Build a key source from an optional file path and optional base64 data.

    Exactly one of the two must be given.

    Args:
        maybe_path: Path to the key file, if any
        maybe_base64: Base64 encoded key value, if any

    Returns:
        FromFile or FromBase64

    Raises:
        ConfigurationAmbiguousError: If neither or both are provided

    Example:
        >>> key_source_from("/etc/kubernetes/ca.crt", None)
        FromFile(path=PosixPath('/etc/kubernetes/ca.crt'))
    """
    if maybe_path is not None and maybe_base64 is None:
        return FromFile(Path(maybe_path))
    if maybe_path is None and maybe_base64 is not None:
        return FromBase64(maybe_base64)
    if maybe_path is None:
        raise ConfigurationAmbiguousError(
            "Missing configuration, neither key path or key data is specified"
        )
    raise ConfigurationAmbiguousError(
        "Ambiguous configuration, both key path and key data is specified",
        f"Key path: {maybe_path}"
    )


@contextmanager
def open_key_stream(source: KeySource) -> Iterator[BinaryIO]:
    """Open the key material as a binary stream.

    The stream is closed when the ``with`` block exits, whether it exits
    normally or through an exception.

    Raises:
        NotFoundError: If a FromFile source cannot be opened
        ParseError: If a FromBase64 source is not valid base64
    """
    if isinstance(source, FromFile):
        logger.debug(f"Reading key material from {source.path}")
        try:
            stream = open(source.path, "rb")
        except OSError as e:
            raise NotFoundError(
                f"Cannot open key file {source.path}",
                f"Error: {type(e).__name__}: {str(e)}"
            ) from e
    elif isinstance(source, FromBase64):
        try:
            stream = io.BytesIO(base64.b64decode(source.base64, validate=True))
        except (binascii.Error, ValueError) as e:
            raise ParseError("Key data is not valid base64", str(e)) from e
    elif isinstance(source, FromString):
        try:
            stream = io.BytesIO(source.value.encode("ascii"))
        except UnicodeEncodeError as e:
            raise ParseError("Key value is not ASCII", str(e)) from e
    else:
        raise TypeError(f"Unknown key source: {type(source).__name__}")

    try:
        yield stream
    finally:
        stream.close()


def load_key_bytes(source: KeySource) -> bytes:
    """Read the whole key material and release the stream."""
    with open_key_stream(source) as stream:
        return stream.read()


def load_key_text(source: KeySource) -> str:
    """Read the whole key material as ASCII text and release the stream.

    Raises:
        ParseError: If the material is not ASCII
    """
    data = load_key_bytes(source)
    try:
        return data.decode("ascii")
    except UnicodeDecodeError as e:
        raise ParseError("Key material is not ASCII text", str(e)) from e
