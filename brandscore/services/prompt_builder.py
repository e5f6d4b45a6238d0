"""
Builds the audit instruction sent to Gemini. Pure and deterministic:
same inputs, same prompt text.
"""
from ..models import BrandIdentity, QuestionCategory, TechnicalCrawlData
from ..utils.urls import extract_domain, normalize_url
from .signals import format_technical_findings

CATEGORY_TITLES = [c.value for c in (
    QuestionCategory.STRATEGY,
    QuestionCategory.OPERATIONS,
    QuestionCategory.VISUALS,
    QuestionCategory.CONTENT,
    QuestionCategory.GROWTH,
    QuestionCategory.SEO,
)]

UNVERIFIED = "could not be verified"


def build_audit_prompt(
    brand: BrandIdentity,
    quiz_block: str,
    crawl: TechnicalCrawlData,
    penalize_failed_scan: bool = False,
) -> str:
    url = normalize_url(brand.url)
    domain = extract_domain(url)
    findings = format_technical_findings(crawl, penalize_failed_scan)
    titles = ", ".join(CATEGORY_TITLES)
    title_enum = " | ".join(f'"{t}"' for t in CATEGORY_TITLES)

    return f"""You are a forensic brand auditor conducting a deep analysis of:
Brand: "{brand.name}"
URL: "{url}"
Domain: "{domain}"

INPUT DATA (measured locally — treat as fact):
{findings}

Questionnaire Results (self-reported by the brand):
{quiz_block or "- No answers provided"}

RESEARCH PROTOCOL (use the Google Search tool before drawing conclusions):
1. Search for "{brand.name}" together with the domain "{domain}" to find what the business actually sells.
2. Search for the brand's social media profiles (LinkedIn, Instagram, X/Twitter).
3. Identify the specific industry (e.g. "SaaS", "Local Bakery", "E-commerce Fashion").

ANALYSIS DIRECTIVES:
- Verification: only state facts about the business that search confirmed for this exact domain.
  If search is inconclusive, write "{UNVERIFIED}" in businessContext instead of guessing.
- Specific advice: no generic advice such as "Improve SEO". Tie every strategy to their industry.
- Vagueness ban: say "Create a 3-month roadmap", not "Ensure you have a plan".
- Perception gap: compare the questionnaire answers with the measured data and flag where the brand
  believes it is doing better than the data shows.
- Do NOT repeat the locally measured metrics above (mobile speed, SEO score, tech stack, critical issues)
  in technicalSignals. Only add signals you discovered yourself.
- You MUST output exactly 6 categories, one per title: {titles}.
- All scores are integers from 0 to 100.

OUTPUT FORMAT: return a single JSON object and nothing else (no markdown, no prose):
{{
  "businessContext": "Industry and what the business does, or '{UNVERIFIED}'.",
  "momentumScore": <integer 0-100>,
  "executiveSummary": "2-3 sentences diagnosing the main bottleneck.",
  "technicalSignals": [
    {{"label": "string", "value": "string", "status": "good" | "warning" | "critical"}}
  ],
  "categories": [
    {{
      "title": {title_enum},
      "score": <integer 0-100>,
      "diagnostic": "Specific observation about this category.",
      "evidence": ["Specific fact 1", "Specific fact 2"],
      "strategy": "Specific, actionable recommendation."
    }}
  ],
  "perceptionGap": {{
    "detected": <boolean>,
    "verdict": "Short verdict.",
    "details": "Where self-assessment and measured reality disagree."
  }}
}}"""
