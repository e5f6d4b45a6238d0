"""
Technical signal collector — Google PageSpeed Insights (Lighthouse, mobile strategy).

Two tiers: an authenticated request, then one anonymous retry whose backoff
depends on why the first request failed. Never raises; every failure ends
in a TechnicalCrawlData with success=False.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings
from ..models import TechnicalCrawlData, WebVitals
from .retry import RetryPolicy, Sleep, run_with_retry

logger = logging.getLogger(__name__)

PSI_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

# Lighthouse audit id -> label shown to the user when the audit scores 0/null
CRITICAL_AUDITS: Dict[str, str] = {
    "errors-in-console": "Console errors",
    "is-crawlable": "Blocked from indexing",
    "robots-txt": "Invalid robots.txt",
    "viewport": "Missing mobile viewport",
    "crawlable-anchors": "Broken links",
}


class PageSpeedError(Exception):
    """A failed PageSpeed request. no_response=True means nothing came back at all."""

    def __init__(self, message: str, status_code: int = None, no_response: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.no_response = no_response


def unavailable(error: Optional[str] = None) -> TechnicalCrawlData:
    return TechnicalCrawlData(success=False, error=error)


def pagespeed_backoff(settings: Settings):
    """Delay before the anonymous retry, chosen by failure class."""
    def _backoff(error: BaseException, attempt: int) -> Optional[float]:
        if not isinstance(error, PageSpeedError):
            return settings.pagespeed_retry_delay_seconds
        if error.no_response:
            return None  # provider never answered; don't pile on
        if error.status_code == 403:
            return 0.0
        if error.status_code == 429:
            return settings.pagespeed_rate_limit_backoff_seconds
        return settings.pagespeed_retry_delay_seconds
    return _backoff


def _score(categories: Dict[str, Any], name: str) -> int:
    raw = (categories.get(name) or {}).get("score")
    if raw is None:
        return 0
    return max(0, min(100, round(float(raw) * 100)))


def _display(audits: Dict[str, Any], audit_id: str) -> str:
    return (audits.get(audit_id) or {}).get("displayValue") or "N/A"


def parse_lighthouse(data: Dict[str, Any]) -> TechnicalCrawlData:
    """Extract scores, vitals, stack and failing critical audits from a PSI body."""
    lighthouse = data.get("lighthouseResult")
    if not isinstance(lighthouse, dict):
        raise PageSpeedError("Response has no lighthouseResult")

    categories = lighthouse.get("categories") or {}
    audits = lighthouse.get("audits") or {}

    tech_stack: List[str] = [
        p["title"] for p in lighthouse.get("stackPacks") or [] if isinstance(p, dict) and p.get("title")
    ]

    bugs: List[str] = []
    for audit_id, label in CRITICAL_AUDITS.items():
        audit = audits.get(audit_id)
        if isinstance(audit, dict) and not audit.get("score"):
            bugs.append(label)

    return TechnicalCrawlData(
        success=True,
        perf_score=_score(categories, "performance"),
        seo_score=_score(categories, "seo"),
        web_vitals=WebVitals(
            lcp=_display(audits, "largest-contentful-paint"),
            cls=_display(audits, "cumulative-layout-shift"),
            fcp=_display(audits, "first-contentful-paint"),
        ),
        tech_stack=tech_stack,
        bugs=bugs,
    )


async def _fetch(url: str, api_key: Optional[str], settings: Settings, client: httpx.AsyncClient) -> Dict[str, Any]:
    params = [
        ("url", url),
        ("strategy", "mobile"),
        ("category", "performance"),
        ("category", "seo"),
        # errors-in-console only runs under best-practices
        ("category", "best-practices"),
    ]
    if api_key:
        params.append(("key", api_key))

    try:
        resp = await client.get(PSI_ENDPOINT, params=params, timeout=settings.pagespeed_timeout_seconds)
    except httpx.TimeoutException as e:
        raise PageSpeedError(f"Timed out after {settings.pagespeed_timeout_seconds}s: {e}", no_response=True)
    except httpx.RequestError as e:
        raise PageSpeedError(f"Request failed: {str(e)[:120]}", no_response=True)

    if resp.status_code >= 400:
        raise PageSpeedError(f"PSI API error: HTTP {resp.status_code}", status_code=resp.status_code)

    try:
        data = resp.json()
    except ValueError:
        raise PageSpeedError("PSI returned a non-JSON body", status_code=resp.status_code)

    if isinstance(data, dict) and data.get("error"):
        err = data["error"]
        message = err.get("message") if isinstance(err, dict) else str(err)
        code = err.get("code") if isinstance(err, dict) else None
        raise PageSpeedError(f"PSI error body: {message}", status_code=code if isinstance(code, int) else None)

    return data


async def collect_technical_data(
    url: str,
    settings: Settings,
    client: httpx.AsyncClient,
    sleep: Sleep = asyncio.sleep,
) -> TechnicalCrawlData:
    """Scan `url` (already normalized). Authenticated first, anonymous on retry."""
    if not settings.pagespeed_api_key:
        logger.warning("PAGESPEED_API_KEY not set — skipping technical scan")
        return unavailable("PageSpeed API key not configured")

    policy = RetryPolicy(
        max_attempts=2,
        backoff=pagespeed_backoff(settings),
        name=f"PageSpeed scan of {url}",
    )

    async def attempt(n: int) -> TechnicalCrawlData:
        key = settings.pagespeed_api_key if n == 1 else None
        data = await _fetch(url, key, settings, client)
        return parse_lighthouse(data)

    try:
        crawl = await run_with_retry(attempt, policy, sleep=sleep)
    except Exception as e:
        logger.warning(f"PageSpeed scan unavailable for {url}: {e}")
        return unavailable(str(e)[:200])

    logger.info(f"PageSpeed scan ok for {url}: perf={crawl.perf_score} seo={crawl.seo_score}")
    return crawl
