"""Build a transport from a data root that is either a URL or a directory."""

from __future__ import annotations

from pathlib import Path

from core.transport.base import Transport
from core.transport.http_transport import HttpTransport
from core.transport.local_transport import LocalTransport


def create_transport(data_root: str, *, timeout_seconds: float = 15.0) -> Transport:
    """Return an HTTP transport for http(s) roots, a local one otherwise."""

    if data_root.startswith(("http://", "https://")):
        return HttpTransport(data_root, timeout_seconds=timeout_seconds)

    root = Path(data_root).expanduser()
    if not root.is_dir():
        raise ValueError(f"Data root is not a directory: {root}")
    return LocalTransport(root)
