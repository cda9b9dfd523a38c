# contract_analyzer/services/extraction.py
"""
Document-intelligence calls used by the analyze route.

`extract` applies a field schema to a document through an OpenAI chat model
with a strict JSON-schema response format; `plaintext` returns the document's
full text. Both accept a file URL and download the document themselves.
"""
import asyncio, json, logging
from typing import Any, Dict, List, Optional

import httpx
from httpx import Timeout, Limits
from openai import AsyncOpenAI
from starlette.requests import Request

from contract_analyzer.config import (
    OPENAI_API_KEY, OPENAI_MODEL, OPENAI_MAX_ATTEMPTS, OPENAI_MAX_TOKENS,
)
from contract_analyzer.errors import DocumentError, ExtractionError
from contract_analyzer.models.extract_models import ExtractResult
from contract_analyzer.services.file_fetch import fetch_file
from contract_analyzer.services.llm_prep_adapter import build_llm_input_text, build_plaintext
from contract_analyzer.services.pdf_extract import extract_from_bytes
from contract_analyzer.services.schema import to_json_schema

log = logging.getLogger("contract_analyzer")

SYSTEM_PROMPT = (
    "You are an expert in structured data extraction from contract documents. "
    "Extract information from the provided document text and return it in the structure "
    "described by the JSON Schema. Output VALID JSON ONLY. Follow these rules strictly: "
    "only rely on the document text; when a value cannot be determined, use an empty string "
    "(or an empty array) instead of guessing; copy quoted clause text character-for-character "
    "from the document, without paraphrasing, re-wrapping or fixing typos; do not include the "
    "[Page N] markers in any value."
)


def _client_from_env() -> AsyncOpenAI:
    http_client = httpx.AsyncClient(
        http2=False,
        headers={"Accept-Encoding": "identity", "Connection": "keep-alive"},
        timeout=Timeout(connect=30.0, read=120.0, write=30.0, pool=120.0),
        limits=Limits(max_connections=10, max_keepalive_connections=2),
        trust_env=False,
    )
    return AsyncOpenAI(http_client=http_client, api_key=OPENAI_API_KEY)


class ExtractionService:
    def __init__(self, client: Optional[AsyncOpenAI] = None, *, model: str = OPENAI_MODEL,
                 http_client: Optional[httpx.AsyncClient] = None,
                 max_attempts: int = OPENAI_MAX_ATTEMPTS, max_tokens: int = OPENAI_MAX_TOKENS,
                 retry_delay: float = 0.8):
        self._client = client
        self.model = model
        # used for document downloads only; None means a fresh client per fetch
        self.http_client = http_client
        self.max_attempts = max(1, max_attempts)
        self.max_tokens = max_tokens
        self.retry_delay = retry_delay

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = _client_from_env()
        return self._client

    async def _load(self, file: str) -> ExtractResult:
        fetched = await fetch_file(file, client=self.http_client)
        # PyMuPDF parsing is blocking; keep it off the event loop
        loop = asyncio.get_running_loop()
        extract = await loop.run_in_executor(
            None, extract_from_bytes, fetched.filename, fetched.data, fetched.content_type
        )
        if not extract.ok:
            raise DocumentError(extract.error or f"Cannot read document: {fetched.filename}")
        log.info(f"[extract] {fetched.filename!r} pages={extract.meta.page_count} sha256={extract.meta.sha256[:12]}")
        return extract

    async def extract(self, file: str, schema: List[Dict[str, Any]]) -> Dict[str, Any]:
        response_schema = to_json_schema(schema)
        extract = await self._load(file)
        user_prompt = (
            "=== DOCUMENT TEXT START ===\n"
            f"{build_llm_input_text(extract)}\n"
            "=== DOCUMENT TEXT END ==="
        )

        last_err: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                resp = await self.client.chat.completions.create(
                    model=self.model,
                    temperature=0.0,
                    max_tokens=self.max_tokens,
                    response_format={"type": "json_schema", "json_schema": response_schema},
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": user_prompt},
                    ],
                )
                raw = resp.choices[0].message.content
                if not raw:
                    raise ExtractionError("Extraction model returned an empty response")
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise ExtractionError("Extraction model returned a non-object JSON value")
                log.info(f"[extract] model={self.model} attempt={attempt} keys={list(data)}")
                return {"data": data}
            except Exception as e:
                last_err = e
                log.warning(f"[extract] attempt {attempt}/{self.max_attempts} failed: {type(e).__name__}: {e}")
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_delay * attempt)

        raise ExtractionError(f"Extraction failed after {self.max_attempts} attempt(s): {last_err}") from last_err

    async def plaintext(self, file: str) -> str:
        extract = await self._load(file)
        return build_plaintext(extract)


def get_extraction_service(request: Request) -> ExtractionService:
    # one service per app, created in create_app()
    return request.app.state.extraction_service
