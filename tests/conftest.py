"""
conftest.py — shared pytest fixtures
Adds the project root to sys.path so `brandscore.*` imports resolve correctly
regardless of where pytest is invoked from.

Providers are faked at their seams: PageSpeed through httpx.MockTransport,
Gemini through an AsyncMock'd client, delays through a recording sleep.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import httpx
import pytest

from brandscore.config import Settings
from brandscore.models import BrandIdentity, QuestionnaireResponse
from brandscore.services.audit import AuditContext

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class SleepRecorder:
    """Stands in for asyncio.sleep; remembers every delay requested."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_settings(**overrides) -> Settings:
    values = dict(
        google_gemini_api_key=None,
        pagespeed_api_key=None,
        mongo_uri=None,
        webhook_url=None,
        app_url="http://localhost:5173",
        penalize_failed_scan=False,
        gemini_model="gemini-2.5-flash",
        ai_temperature=0.4,
        ai_max_attempts=2,
        ai_retry_delay_seconds=1.0,
        pagespeed_rate_limit_backoff_seconds=4.0,
        pagespeed_retry_delay_seconds=1.0,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def lighthouse_body(perf=0.95, seo=0.92, stack=("WordPress",), failing=()):
    """Minimal PSI v5 response body."""
    audits = {
        "largest-contentful-paint": {"displayValue": "1.8 s"},
        "cumulative-layout-shift": {"displayValue": "0.02"},
        "first-contentful-paint": {"displayValue": "1.1 s"},
        "errors-in-console": {"score": 1},
        "is-crawlable": {"score": 1},
        "robots-txt": {"score": 1},
        "viewport": {"score": 1},
        "crawlable-anchors": {"score": 1},
    }
    for audit_id in failing:
        audits[audit_id] = {"score": 0}
    return {
        "lighthouseResult": {
            "categories": {"performance": {"score": perf}, "seo": {"score": seo}},
            "audits": audits,
            "stackPacks": [{"id": s.lower(), "title": s} for s in stack],
        }
    }


class PSIFake:
    """
    Scripted PageSpeed provider. Each queued item is an httpx.Response,
    a dict (200 JSON body), an int (status code) or "timeout".
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome == "timeout":
            raise httpx.ReadTimeout("timed out", request=request)
        if isinstance(outcome, int):
            return httpx.Response(outcome, json={"error": {"code": outcome, "message": "nope"}})
        if isinstance(outcome, dict):
            return httpx.Response(200, json=outcome)
        return outcome

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def keys_sent(self):
        return [r.url.params.get("key") for r in self.requests]


def gemini_response(text: str, uris=()):
    chunks = [SimpleNamespace(web=SimpleNamespace(uri=u)) for u in uris]
    candidate = SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=chunks))
    return SimpleNamespace(text=text, candidates=[candidate])


def gemini_client(*outcomes):
    """Fake genai.Client: each outcome is a response object or an exception to raise."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(side_effect=list(outcomes))
    return client


def category(title, score=70):
    return {
        "title": title,
        "score": score,
        "diagnostic": f"{title} diagnostic.",
        "evidence": [f"{title} fact"],
        "strategy": f"{title} strategy.",
    }


AI_REPORT = {
    "businessContext": "Acme Bakery is an artisan bakery in Portland selling wholesale bread.",
    "momentumScore": 72,
    "executiveSummary": "Strong product, weak lead capture.",
    "technicalSignals": [
        {"label": "mobile speed", "value": "88/100", "status": "warning"},
        {"label": "Review Widgets", "value": "None found", "status": "warning"},
    ],
    "categories": [category(t) for t in ("Strategy", "Operations", "Visuals", "Content", "Growth", "SEO")],
    "perceptionGap": {"detected": True, "verdict": "Overconfident", "details": "Claims automation, none found."},
}


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def brand():
    return BrandIdentity(name="Acme Bakery", url="  acmebakery.com/ ")


@pytest.fixture
def responses():
    """16 answers, 8 of them YES."""
    return [QuestionnaireResponse(question_id=i, answer=1 if i % 2 else 0) for i in range(1, 17)]


@pytest.fixture
def make_ctx(sleep):
    """Build an AuditContext around fakes; closes nothing real."""
    def _make(settings, psi=None, ai_client=None):
        psi = psi or PSIFake()
        return AuditContext(
            settings=settings,
            http=psi.client(),
            ai_client=ai_client,
            sleep=sleep,
            clock=lambda: FIXED_NOW,
        )
    return _make
