# contract_analyzer/services/file_fetch.py
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from contract_analyzer.config import FETCH_TIMEOUT_SECONDS
from contract_analyzer.errors import DocumentError

log = logging.getLogger("contract_analyzer")


@dataclass
class FetchedFile:
    filename: str
    content_type: Optional[str]
    data: bytes


def filename_from_url(url: str) -> str:
    path = urlparse(url).path
    name = unquote(path.rsplit("/", 1)[-1]) if path else ""
    return name or "document.pdf"


async def fetch_file(file_url: str, *, client: Optional[httpx.AsyncClient] = None) -> FetchedFile:
    """Download the document behind `file_url`. HTTP errors propagate to the caller."""
    scheme = urlparse(file_url).scheme.lower()
    if scheme not in ("http", "https"):
        raise DocumentError(f"Unsupported file URL: {file_url}")

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(timeout=FETCH_TIMEOUT_SECONDS, follow_redirects=True)
    try:
        r = await client.get(file_url)
        r.raise_for_status()
    finally:
        if own_client:
            await client.aclose()

    content_type = r.headers.get("content-type")
    if content_type:
        content_type = content_type.split(";", 1)[0].strip().lower()
    filename = filename_from_url(file_url)
    log.info(f"[fetch] {filename!r} -> {r.status_code} type={content_type} len={len(r.content)}")
    return FetchedFile(filename=filename, content_type=content_type, data=r.content)
