# contract_analyzer/services/llm_prep_adapter.py
from contract_analyzer.config import LLM_INPUT_MAX_CHARS
from contract_analyzer.models.extract_models import ExtractResult

def build_plaintext(extract: ExtractResult) -> str:
    # offsets returned to clients index into exactly this string
    return "\n".join(p.text or "" for p in extract.pages)

def build_llm_input_text(extract: ExtractResult, *, max_chars: int = LLM_INPUT_MAX_CHARS) -> str:
    parts = []
    for p in extract.pages:
        parts.append(f"[Page {p.page}]\n{(p.text or '').strip()}\n")
    full = "\n".join(parts)
    if max_chars and len(full) > max_chars:
        full = full[:max_chars] + "\n...[TRUNCATED]"
    return full
