from pydantic import BaseModel, Field
from typing import List, Literal

Level = Literal["ok", "warn", "bad"]

# ==========================================
# 🧱 CORE MODELS
# ==========================================

class IDNInfo(BaseModel):
    domain: str
    is_idn: bool = False
    unicode_form: str

    class Config:
        frozen = True

class ExtractedEntities(BaseModel):
    urls: List[str] = []
    emails: List[str] = []
    domains: List[str] = []
    idn_info: List[IDNInfo] = []

    class Config:
        frozen = True

class Finding(BaseModel):
    level: Level
    message: str
    # Identifier of the rule that produced the finding
    rule: str

    class Config:
        frozen = True

class RuleResult(BaseModel):
    """Contribution of a single heuristic rule"""
    weight: int = Field(default=0, ge=0)
    findings: List[Finding] = []

    class Config:
        frozen = True

class Verdict(BaseModel):
    label: Literal["High", "Medium", "Low"]
    tier: Level

    class Config:
        frozen = True

class AnalysisResult(BaseModel):
    score: int = Field(ge=0, le=100)
    verdict: Verdict
    urls: List[str] = []
    emails: List[str] = []
    domains: List[str] = []
    idn_info: List[IDNInfo] = []
    findings: List[Finding] = []

    class Config:
        frozen = True

# ==========================================
# 📤 SERVICE / RESPONSE MODELS
# ==========================================

class SourceText(BaseModel):
    """A source that was turned into text successfully"""
    name: str
    kind: Literal["file", "pasted"]
    characters: int

class SourceFailure(BaseModel):
    """A source that failed extraction and was skipped"""
    name: str
    error: str
    detail: str

class DocumentAnalysis(BaseModel):
    result: AnalysisResult
    sources: List[SourceText] = []
    errors: List[SourceFailure] = []

# ==========================================
# 📥 INPUT MODELS
# ==========================================

class TextSubmission(BaseModel):
    text: str = ""
