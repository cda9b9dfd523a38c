# contract_analyzer/models/llm_models.py
from pydantic import BaseModel
from typing import Optional


class Suggestion(BaseModel):
    """One entry of `contractSuggestions` as returned by the extraction call."""
    type: str
    title: Optional[str] = None
    description: Optional[str] = None
    exactClause: str
