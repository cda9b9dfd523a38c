# contract_analyzer/models/api_models.py
from pydantic import BaseModel
from typing import List, Optional, Tuple

class Issue(BaseModel):
    id: str
    type: str
    # left out of the response when the extraction call omitted them
    title: Optional[str] = None
    description: Optional[str] = None

class Section(BaseModel):
    id: str
    type: str
    # [start, end) into the plaintext; start is -1 when the clause was not found
    range: Tuple[int, int]

class AnalyzeResult(BaseModel):
    issues: List[Issue] = []
    sections: List[Section] = []

class AnalyzeResponse(BaseModel):
    result: AnalyzeResult

class ErrorResponse(BaseModel):
    error: str
