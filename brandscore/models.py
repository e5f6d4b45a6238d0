from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from enum import Enum


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire (browser + AI JSON)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuestionCategory(str, Enum):
    STRATEGY = "Strategy"
    VISUALS = "Visuals"
    GROWTH = "Growth"
    CONTENT = "Content"
    OPERATIONS = "Operations"
    SEO = "SEO"


class QuestionType(str, Enum):
    BOOLEAN = "boolean"
    SCALE = "scale"


class SignalStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


# ─── Quiz ──────────────────────────────────────────────────────────────────────

class Question(CamelModel):
    id: int
    text: str
    category: QuestionCategory
    type: QuestionType = QuestionType.BOOLEAN


class QuestionnaireResponse(CamelModel):
    question_id: int
    answer: int = Field(..., description="0/1 for boolean questions, 1-5 for scale questions")


class BrandIdentity(CamelModel):
    name: str
    url: str = Field(..., description="Site address as typed by the user")

    model_config = {
        "json_schema_extra": {
            "example": {"name": "Acme Bakery", "url": "acmebakery.com"}
        }
    }


class LeadInfo(CamelModel):
    first_name: str
    last_name: str = ""
    position: str = ""
    email: str
    phone: str = ""
    revenue: str = ""
    company_size: str = ""
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or f"{self.first_name} {self.last_name}".strip()


# ─── Technical crawl ───────────────────────────────────────────────────────────

class WebVitals(CamelModel):
    lcp: str = "N/A"
    cls: str = "N/A"
    fcp: str = "N/A"


class TechnicalCrawlData(CamelModel):
    """Result of one PageSpeed scan. Scores are -1 when unavailable."""
    success: bool
    perf_score: int = -1
    seo_score: int = -1
    web_vitals: WebVitals = Field(default_factory=WebVitals)
    tech_stack: List[str] = []
    bugs: List[str] = []
    error: Optional[str] = None


# ─── Audit report ──────────────────────────────────────────────────────────────

class TechnicalSignal(CamelModel):
    label: str
    value: str
    status: SignalStatus


class CategoryAnalysis(CamelModel):
    title: QuestionCategory
    score: int = Field(..., ge=0, le=100)
    diagnostic: str
    evidence: List[str] = []
    strategy: str


class PerceptionGap(CamelModel):
    detected: bool = False
    verdict: str = "None"
    details: str = ""


class DebugLog(CamelModel):
    psi_data: TechnicalCrawlData
    formatted_user_answers: str
    generated_at: datetime


class AuditResult(CamelModel):
    momentum_score: int = Field(..., ge=0, le=100)
    business_context: str
    executive_summary: str
    technical_signals: List[TechnicalSignal] = []
    categories: List[CategoryAnalysis] = []
    perception_gap: PerceptionGap = Field(default_factory=PerceptionGap)
    grounding_urls: Optional[List[str]] = None
    debug_log: Optional[DebugLog] = None
