# contract_analyzer/services/analyzer.py
import logging, uuid
from typing import Any, Dict, List, Protocol, Tuple

from contract_analyzer.errors import BadRequest
from contract_analyzer.models.api_models import AnalyzeResult, Issue, Section
from contract_analyzer.models.llm_models import Suggestion
from contract_analyzer.services.schema import CONTRACT_SUGGESTIONS_SCHEMA

log = logging.getLogger("contract_analyzer")


class DocumentService(Protocol):
    async def extract(self, file: str, schema: List[Dict[str, Any]]) -> Dict[str, Any]: ...
    async def plaintext(self, file: str) -> str: ...


def locate_clause(text: str, clause: str) -> Tuple[int, int]:
    # a missing clause yields (-1, len(clause) - 1); callers get it unchanged
    start = text.find(clause)
    return start, start + len(clause)


def _suggestions_from(extracted: Any) -> Any:
    data = extracted.get("data") if isinstance(extracted, dict) else None
    if not isinstance(data, dict):
        return []
    return data.get("contractSuggestions") or []


async def analyze_contract(file_url: str, service: DocumentService) -> AnalyzeResult:
    # 1) schema extraction
    extracted = await service.extract(file=file_url, schema=CONTRACT_SUGGESTIONS_SCHEMA)
    suggestions = _suggestions_from(extracted)
    if not isinstance(suggestions, list) or len(suggestions) == 0:
        raise BadRequest("No contract suggestions found.")
    log.info(f"[analyze] {len(suggestions)} suggestion(s)")

    # 2) plaintext for offsets
    text = await service.plaintext(file=file_url)

    # 3) suggestions -> issues + sections
    result = AnalyzeResult()
    for raw in suggestions:
        s = Suggestion.model_validate(raw)
        sid = str(uuid.uuid4())
        stype = s.type.lower()

        result.issues.append(Issue(id=sid, type=stype, title=s.title, description=s.description))

        start, end = locate_clause(text, s.exactClause)
        if start == -1:
            log.warning(f"[analyze] could not find exactClause in extracted text: {s.exactClause!r}")
        result.sections.append(Section(id=sid, type=stype, range=(start, end)))

    return result
