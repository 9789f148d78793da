"""HTTP multipart adapter for image beds."""
from __future__ import annotations

import logging
import mimetypes
from typing import Any, List, Mapping, Optional

import httpx

from ..models import UploadResult

logger = logging.getLogger(__name__)


class HTTPDestination:
    """
    Generic image bed reached by a multipart POST.

    Implements IDestination protocol. The bed's JSON response must expose
    the image URL at ``url_path`` (dotted, list indexes allowed).
    """

    def __init__(
        self,
        endpoint: str,
        field: str = "file",
        url_path: str = "url",
        headers: Optional[Mapping[str, str]] = None,
        form: Optional[Mapping[str, str]] = None,
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._endpoint = endpoint
        self._field = field
        self._url_path = url_path
        self._headers = dict(headers or {})
        self._form = dict(form or {})
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "HTTPDestination":
        if not data.get("endpoint"):
            raise ValueError("HTTP destination requires an 'endpoint'")
        return cls(
            endpoint=data["endpoint"],
            field=data.get("field", "file"),
            url_path=data.get("url_path", "url"),
            headers=data.get("headers"),
            form=data.get("form"),
            timeout=int(data.get("timeout", 60)),
        )

    async def upload(self, context) -> List[UploadResult]:
        results: List[UploadResult] = []
        async with httpx.AsyncClient(
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            for artifact in context.artifacts:
                if artifact.buffer is None:
                    raise ValueError(f"{artifact.file_name} has no image content")

                mime = mimetypes.guess_type(artifact.file_name)[0] or "application/octet-stream"
                response = await client.post(
                    self._endpoint,
                    data=self._form,
                    files={self._field: (artifact.file_name, artifact.buffer, mime)},
                )

                if response.status_code >= 400:
                    try:
                        error_detail = response.json()
                    except Exception:
                        error_detail = response.text
                    raise RuntimeError(
                        f"{context.destination_id} error {response.status_code}: {error_detail}"
                    )

                payload = response.json()
                url = extract_path(payload, self._url_path)
                logger.debug(f"{context.destination_id} returned {url} for {artifact.file_name}")
                results.append(
                    UploadResult(
                        file_name=artifact.file_name,
                        url=str(url) if url else None,
                        metadata={"status_code": response.status_code},
                    )
                )
        return results


def extract_path(payload: Any, path: str) -> Any:
    """Walk a dotted path (``data.links.0.url``) through JSON data."""
    node = payload
    for part in path.split("."):
        if isinstance(node, Mapping):
            node = node.get(part)
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            return None
        if node is None:
            return None
    return node
