"""
HTTP surface (FastAPI TestClient), lead payloads and magic links.
The audit context on app.state is swapped for one built around fakes.
"""
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from brandscore.main import app
from brandscore.middleware import rate_limit
from brandscore.models import AuditResult, BrandIdentity, LeadInfo, QuestionnaireResponse
from brandscore.services.crm_service import build_lead_payload, format_quiz_data, submit_lead
from brandscore.services.magic_link import decode_magic_link, encode_report, generate_magic_link
from brandscore.utils import db_audits

from conftest import AI_REPORT, PSIFake, make_settings

BRAND = {"name": "Acme Bakery", "url": "acmebakery.com"}
LEAD = {"firstName": "Sam", "lastName": "Rivera", "email": "sam@acmebakery.com", "phone": "555-0100",
        "position": "Owner", "revenue": "$1M-$5M", "companySize": "11-50"}
RESPONSES = [{"questionId": i, "answer": 1 if i <= 8 else 0} for i in range(1, 17)]


def sample_result() -> AuditResult:
    return AuditResult.model_validate({**AI_REPORT, "groundingUrls": ["https://acmebakery.com/about"]})


@pytest.fixture
def api(make_ctx, monkeypatch):
    """Yields (client, install) where install(settings, psi) swaps the audit context."""
    monkeypatch.setattr(db_audits, "get_db", lambda: None)
    monkeypatch.setattr(db_audits, "_mem", {})
    rate_limit.reset()
    with TestClient(app) as client:
        original = app.state.audit_ctx

        def install(settings=None, psi=None):
            app.state.audit_ctx = make_ctx(settings or make_settings(), psi)

        install()
        yield client, install
        app.state.audit_ctx = original
    rate_limit.reset()


# ─── Endpoints ─────────────────────────────────────────────────────────────────

class TestAuditEndpoints:

    def test_health(self, api):
        client, _ = api
        body = client.get("/health").json()
        assert body["status"] == "ok"

    def test_questions(self, api):
        client, _ = api
        questions = client.get("/api/questions").json()
        assert len(questions) == 16
        assert questions[0]["category"] == "Strategy"
        assert questions[0]["type"] == "boolean"

    def test_audit_returns_complete_camel_case_report(self, api):
        client, _ = api
        resp = client.post("/api/audit", json={"brand": BRAND, "responses": RESPONSES})
        assert resp.status_code == 200
        body = resp.json()
        assert body["momentumScore"] == 50
        assert body["perceptionGap"]["verdict"] == "Inconclusive"
        assert len(body["categories"]) == 6
        assert body["technicalSignals"][0]["status"] == "warning"

    def test_audit_rejects_malformed_body(self, api):
        client, _ = api
        resp = client.post("/api/audit", json={"brand": {"name": "No URL"}})
        assert resp.status_code == 422

    def test_audit_is_rate_limited(self, api, monkeypatch):
        client, _ = api
        monkeypatch.setattr(rate_limit, "get_settings", lambda: make_settings(rate_limit_per_minute=1))
        assert client.post("/api/audit", json={"brand": BRAND, "responses": []}).status_code == 200
        limited = client.post("/api/audit", json={"brand": BRAND, "responses": []})
        assert limited.status_code == 429
        assert "Retry-After" in limited.headers

    def test_idle_clients_are_forgotten(self, api):
        rate_limit.hit("10.0.0.1:/api/audit", 5, now=1000.0)
        rate_limit.hit("10.0.0.2:/api/audit", 5, now=1050.0)
        assert rate_limit.sweep(now=1070.0) == 1
        assert list(rate_limit._log) == ["10.0.0.2:/api/audit"]

    def test_hit_reports_seconds_until_retry(self, api):
        assert rate_limit.hit("10.0.0.3:/api/leads", 1, now=2000.0) == 0
        assert rate_limit.hit("10.0.0.3:/api/leads", 1, now=2010.0) == 51


class TestLeadEndpoints:

    def _lead_body(self):
        return {
            "lead": LEAD,
            "brand": BRAND,
            "result": sample_result().model_dump(mode="json", by_alias=True),
            "responses": RESPONSES,
        }

    def test_lead_saved_and_forwarded(self, api):
        client, install = api
        hook = PSIFake(httpx.Response(200, json={"status": "success"}))
        install(make_settings(webhook_url="https://hooks.example.com/catch/1"), hook)

        resp = client.post("/api/leads", json=self._lead_body())

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["reportUrl"] == f"http://localhost:5173?id={body['auditId']}"

        sent = hook.requests[0]
        assert sent.method == "POST"
        assert sent.headers["content-type"] == "text/plain"
        payload = json.loads(sent.content)
        assert payload["report_link"] == body["reportUrl"]
        assert payload["scores"]["total"] == 72
        assert payload["lead"]["name"] == "Sam Rivera"

        stored = client.get(f"/api/reports/{body['auditId']}").json()
        assert stored["brand"]["name"] == "Acme Bakery"
        assert stored["result"]["momentumScore"] == 72
        assert stored["lead"]["fullName"] == "Sam Rivera"

        record = db_audits._mem[body["auditId"]]
        assert record["report_url"] == body["reportUrl"]
        assert record["report_data"]["crm"]["summary"] == AI_REPORT["executiveSummary"]

    def test_webhook_failure_reported(self, api):
        client, install = api
        install(make_settings(webhook_url="https://hooks.example.com/catch/1"), PSIFake(500))
        body = client.post("/api/leads", json=self._lead_body()).json()
        assert body["success"] is False
        assert body["auditId"]

    def test_missing_webhook_is_skipped(self, api):
        client, _ = api
        assert client.post("/api/leads", json=self._lead_body()).json()["success"] is True

    def test_unknown_report_404(self, api):
        client, _ = api
        assert client.get("/api/reports/does-not-exist").status_code == 404


class TestRestoreEndpoint:

    def test_restore_from_token(self, api):
        client, _ = api
        token = encode_report(BrandIdentity(**BRAND), sample_result())
        resp = client.get("/api/reports/restore", params={"r": token})
        assert resp.status_code == 200
        assert resp.json()["result"]["businessContext"] == AI_REPORT["businessContext"]

    def test_restore_rejects_garbage(self, api):
        client, _ = api
        assert client.get("/api/reports/restore", params={"r": "____"}).status_code == 400


# ─── Magic links ───────────────────────────────────────────────────────────────

class TestMagicLink:

    def test_link_round_trip_drops_debug_log(self):
        brand = BrandIdentity(name="Café Ünïcode", url="cafe.de")
        result = sample_result()
        link = generate_magic_link("https://score.example.com/", brand, result)
        assert link.startswith("https://score.example.com?r=")

        restored_brand, restored = decode_magic_link(link.split("?r=", 1)[1])
        assert restored_brand == brand
        assert restored.momentum_score == result.momentum_score
        assert restored.debug_log is None

    def test_standard_base64_with_padding_accepted(self):
        import base64
        raw = json.dumps({"brand": BRAND, "result": AI_REPORT}).encode()
        brand, result = decode_magic_link(base64.b64encode(raw).decode())
        assert brand.name == "Acme Bakery"
        assert result.momentum_score == 72

    @pytest.mark.parametrize("token", ["", "e30", "bm90IGpzb24"])
    def test_bad_tokens(self, token):
        with pytest.raises(ValueError):
            decode_magic_link(token)


# ─── CRM payload ───────────────────────────────────────────────────────────────

class TestLeadPayload:

    def test_quiz_data_uses_yes_no(self):
        rows = format_quiz_data([
            QuestionnaireResponse(question_id=1, answer=1),
            QuestionnaireResponse(question_id=2, answer=0),
            QuestionnaireResponse(question_id=42, answer=3),
        ])
        assert [r["answer"] for r in rows] == ["Yes", "No", "3"]
        assert rows[2]["category"] == "Unknown"
        assert rows[2]["question"] == "Question 42"

    def test_scores_default_to_zero_for_missing_categories(self):
        result = sample_result().model_copy(update={"categories": []})
        payload = build_lead_payload(
            LeadInfo.model_validate(LEAD), BrandIdentity(**BRAND), result, [], "https://x",
        )
        assert payload["scores"] == {"total": 72, "strategy": 0, "growth": 0, "visuals": 0}
        assert payload["brand"] == BRAND
        assert payload["quiz_data"] == []

    @pytest.mark.asyncio
    async def test_submit_swallows_transport_errors(self):
        psi = PSIFake(httpx.ConnectError("refused"))
        settings = make_settings(webhook_url="https://hooks.example.com/x")
        async with psi.client() as client:
            assert await submit_lead({"brand": BRAND}, settings, client) is False

    @pytest.mark.asyncio
    async def test_submit_with_malformed_webhook_url_returns_false(self):
        psi = PSIFake()
        settings = make_settings(webhook_url="http://[::1")
        async with psi.client() as client:
            assert await submit_lead({"brand": BRAND}, settings, client) is False
        assert psi.requests == []
