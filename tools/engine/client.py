"""tools/engine/client.py

All engine-distribution HTTP calls live here.

Design goals:
  - Keep network I/O separated from caching and validation
    (see :mod:`tools.engine.repository`).
  - Bound every call: connect timeout plus an overall deadline that is
    checked between chunks, since requests only bounds single reads.
  - No retries. The external timer re-invokes the runner, which is the retry.

Functions accept an optional ``session`` (anything with a requests-style
``get``) so callers can share connection pools and tests can stub the network.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Iterator, Optional

import requests

from ssa_benchmark.errors import NetworkError

CHUNK_SIZE = 64 * 1024


def _http(session: Optional[Any]) -> Any:
    return session if session is not None else requests


def _stream_until(resp: Any, deadline: float, url: str, limit: float) -> Iterator[bytes]:
    """Yield non-empty chunks of *resp*, failing once *deadline* has passed."""
    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
        if time.monotonic() > deadline:
            raise NetworkError(f"Transfer from {url} exceeded {limit}s")
        if chunk:
            yield chunk


def fetch_latest_version(
    url: str,
    *,
    connect_timeout: float = 10,
    total_timeout: float = 30,
    session: Optional[Any] = None,
) -> str:
    """GET a plain-text version token and return it whitespace-trimmed.

    *total_timeout* bounds the whole exchange, not just each socket read.
    """
    deadline = time.monotonic() + total_timeout
    try:
        resp = _http(session).get(url, stream=True, timeout=(connect_timeout, total_timeout))
        try:
            resp.raise_for_status()
            body = b"".join(_stream_until(resp, deadline, url, total_timeout))
        finally:
            resp.close()
    except requests.RequestException as e:
        raise NetworkError(f"Failed to fetch latest version from {url}: {e}") from e

    version = "".join(body.decode("utf-8", errors="replace").split())
    if not version:
        raise NetworkError(f"Failed to fetch latest version from {url}: empty response from server")
    return version


def download_file(
    url: str,
    dest: Path,
    *,
    connect_timeout: float = 30,
    total_timeout: float = 300,
    session: Optional[Any] = None,
) -> int:
    """Stream *url* into *dest*; return the number of bytes written.

    ``requests`` only bounds individual socket reads, so the overall deadline
    is checked between chunks. Local write failures (disk full, permissions,
    something else occupying *dest*) are reported as NetworkError too, the
    same way a failed transfer is. On any error *dest* may be left partial;
    the caller owns cleanup.
    """
    dest = Path(dest)
    deadline = time.monotonic() + total_timeout
    written = 0
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        resp = _http(session).get(
            url,
            stream=True,
            allow_redirects=True,
            timeout=(connect_timeout, total_timeout),
        )
        try:
            resp.raise_for_status()
            with dest.open("wb") as f:
                for chunk in _stream_until(resp, deadline, url, total_timeout):
                    f.write(chunk)
                    written += len(chunk)
        finally:
            resp.close()
    except requests.RequestException as e:
        raise NetworkError(f"Failed to download {url}: {e}") from e
    except OSError as e:
        raise NetworkError(f"Failed to write download of {url} to {dest}: {e}") from e
    return written
