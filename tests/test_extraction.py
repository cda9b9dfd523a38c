import asyncio
import json
import logging
import time
from types import SimpleNamespace

import httpx
import pytest

from contract_analyzer.errors import DocumentError, ExtractionError
from contract_analyzer.services.extraction import ExtractionService
from contract_analyzer.services.schema import CONTRACT_SUGGESTIONS_SCHEMA, SchemaError

FILE_URL = "https://files.test/contract.txt"
DOC_TEXT = "Section 1. Either party may terminate this agreement.\nSection 2. Fees are due monthly."


class StubCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


def _service(replies, body=DOC_TEXT, status=200, max_attempts=1):
    completions = StubCompletions(replies)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    transport = httpx.MockTransport(
        lambda request: httpx.Response(status, content=body.encode("utf-8"), headers={"content-type": "text/plain"})
    )
    http_client = httpx.AsyncClient(transport=transport)
    return ExtractionService(client, model="test-model", http_client=http_client,
                             max_attempts=max_attempts, retry_delay=0), completions


def test_extract_wraps_model_json_under_data():
    payload = {"contractSuggestions": [
        {"type": "high", "title": "Termination", "description": "d",
         "exactClause": "Either party may terminate this agreement."},
    ]}
    service, completions = _service([json.dumps(payload)])

    out = asyncio.run(service.extract(file=FILE_URL, schema=CONTRACT_SUGGESTIONS_SCHEMA))

    assert out == {"data": payload}
    req = completions.requests[0]
    assert req["model"] == "test-model"
    assert req["temperature"] == 0.0
    assert req["response_format"]["type"] == "json_schema"
    assert req["response_format"]["json_schema"]["schema"]["required"] == ["contractSuggestions"]
    assert "[Page 1]" in req["messages"][1]["content"]
    assert "Either party may terminate" in req["messages"][1]["content"]


def test_plaintext_returns_document_text():
    service, completions = _service([])
    text = asyncio.run(service.plaintext(file=FILE_URL))
    assert text == DOC_TEXT
    assert completions.requests == []


def test_invalid_schema_fails_before_any_call():
    service, completions = _service([])
    with pytest.raises(SchemaError):
        asyncio.run(service.extract(file=FILE_URL, schema=[{"name": "x", "type": "date"}]))
    assert completions.requests == []


def test_unparseable_reply_raises_extraction_error():
    service, _ = _service(["not json"])
    with pytest.raises(ExtractionError):
        asyncio.run(service.extract(file=FILE_URL, schema=CONTRACT_SUGGESTIONS_SCHEMA))


def test_empty_reply_raises_extraction_error():
    service, _ = _service([None])
    with pytest.raises(ExtractionError, match="empty response"):
        asyncio.run(service.extract(file=FILE_URL, schema=CONTRACT_SUGGESTIONS_SCHEMA))


def test_retries_when_configured():
    service, completions = _service([RuntimeError("rate limited"), json.dumps({"contractSuggestions": []})],
                                    max_attempts=2)
    out = asyncio.run(service.extract(file=FILE_URL, schema=CONTRACT_SUGGESTIONS_SCHEMA))
    assert out == {"data": {"contractSuggestions": []}}
    assert len(completions.requests) == 2


def test_gives_up_after_last_attempt():
    service, completions = _service([RuntimeError("boom"), RuntimeError("boom")], max_attempts=2)
    with pytest.raises(ExtractionError, match="after 2 attempt"):
        asyncio.run(service.extract(file=FILE_URL, schema=CONTRACT_SUGGESTIONS_SCHEMA))
    assert len(completions.requests) == 2


def test_unreadable_document_raises_document_error():
    service, _ = _service([], body="")
    service.http_client = httpx.AsyncClient(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, content=b"garbage", headers={"content-type": "application/pdf"})
    ))
    with pytest.raises(DocumentError):
        asyncio.run(service.plaintext(file="https://files.test/contract.pdf"))


def test_download_failure_propagates():
    service, _ = _service([], status=503)
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(service.plaintext(file=FILE_URL))


def test_document_parsing_does_not_block_event_loop(monkeypatch):
    from contract_analyzer.services import extraction
    real_extract = extraction.extract_from_bytes

    def slow_extract(*args):
        time.sleep(0.4)
        return real_extract(*args)
    monkeypatch.setattr(extraction, "extract_from_bytes", slow_extract)

    service, _ = _service([])

    async def run():
        ticks = 0
        task = asyncio.ensure_future(service.plaintext(file=FILE_URL))
        while not task.done():
            await asyncio.sleep(0.02)
            ticks += 1
        return ticks, task.result()

    ticks, text = asyncio.run(run())
    assert text == DOC_TEXT
    assert ticks >= 5


def test_load_logs_document_hash(caplog):
    service, _ = _service([])
    with caplog.at_level(logging.INFO, logger="contract_analyzer"):
        asyncio.run(service.plaintext(file=FILE_URL))
    assert any("sha256=" in r.getMessage() for r in caplog.records)
