# contract_analyzer/models/extract_models.py
from pydantic import BaseModel
from typing import List, Optional

class ExtractPage(BaseModel):
    page: int
    text: str

class ExtractMeta(BaseModel):
    filename: str
    page_count: int
    sha256: str
    content_type: Optional[str] = None

class ExtractResult(BaseModel):
    ok: bool = True
    meta: ExtractMeta
    pages: List[ExtractPage]
    error: Optional[str] = None
