"""
Helpers for bounding the total duration of streamed HTTP responses.

``requests`` applies its ``timeout`` to connecting and to each socket read,
so a server trickling bytes can outlive it. Bodies are read in chunks and
checked against an absolute deadline instead.
"""
import json
import time
from typing import Any

import requests

from diagram_lookup.errors import UpstreamError, UpstreamTimeout

CHUNK_SIZE = 8192


def deadline_after(seconds: float) -> float:
    return time.monotonic() + seconds


def read_body(response: requests.Response, deadline: float) -> bytes:
    """
    Read a streamed response body, giving up once ``deadline`` passes.

    Raises:
        UpstreamTimeout: the deadline passed before the body was complete
        UpstreamError: the connection broke mid-body
    """
    chunks = []
    try:
        if time.monotonic() > deadline:
            raise UpstreamTimeout("Response headers arrived after the deadline")
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if time.monotonic() > deadline:
                raise UpstreamTimeout("Response body was not complete before the deadline")
            chunks.append(chunk)
    except requests.Timeout as exc:
        raise UpstreamTimeout(f"Timed out reading response body: {exc}") from exc
    except requests.RequestException as exc:
        raise UpstreamError(f"Failed reading response body: {exc}") from exc
    finally:
        response.close()
    return b"".join(chunks)


def read_json(response: requests.Response, deadline: float) -> Any:
    """Read a streamed body within ``deadline`` and decode it as JSON."""
    body = read_body(response, deadline)
    try:
        return json.loads(body)
    except ValueError as exc:
        raise UpstreamError("Response body is not valid JSON") from exc
