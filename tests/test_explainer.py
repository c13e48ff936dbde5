"""Tests for decision explanations."""

import asyncio
import json

import httpx
import pytest

from app.exceptions import ExplanationError
from app.models import PaymentStatus, Provider, RiskResult
from app.screening.explainer import (
    CachedExplainer,
    ChatCompletionExplainer,
    build_prompt,
    fallback_explanation,
    risk_level,
)
from tests.conftest import make_data


def _result(score=0.35, rules=("test_domain", "odd_cent_patterns"), high_risk=False):
    return RiskResult(risk_score=score, triggered_rules=list(rules), is_high_risk=high_risk)


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class TestFallbackExplanation:
    def test_routed(self):
        text = fallback_explanation(_result(), Provider.PAYPAL, PaymentStatus.SUCCESS)
        assert text == (
            "This payment was routed to paypal due to a moderate risk score (0.35) "
            "based on test_domain, odd_cent_patterns."
        )

    def test_blocked(self):
        result = _result(score=1.0, rules=["large_amount"], high_risk=True)
        text = fallback_explanation(result, Provider.BLOCKED, PaymentStatus.BLOCKED)
        assert text == "This payment was blocked due to a high risk score (1.00) based on large_amount."

    def test_low_risk_formats_two_decimals(self):
        text = fallback_explanation(_result(score=0.1, rules=["odd_cent_patterns"]), Provider.STRIPE, PaymentStatus.SUCCESS)
        assert "low risk score (0.10)" in text

    def test_risk_level_bands(self):
        assert risk_level(0.0) == "low"
        assert risk_level(0.29) == "low"
        assert risk_level(0.3) == "moderate"
        assert risk_level(0.69) == "moderate"
        assert risk_level(0.7) == "high"


class TestBuildPrompt:
    def test_includes_decision_details(self):
        prompt = build_prompt(make_data(amount=75.5), _result(), Provider.PAYPAL, PaymentStatus.SUCCESS)
        assert "USD 75.5" in prompt
        assert "Risk Score: 0.35" in prompt
        assert "Triggered rules: test_domain, odd_cent_patterns" in prompt
        assert "processed and routed to paypal" in prompt

    def test_no_rules(self):
        prompt = build_prompt(make_data(), _result(score=0, rules=[]), Provider.STRIPE, PaymentStatus.SUCCESS)
        assert "No specific risk factors detected" in prompt


class TestChatCompletionExplainer:
    def _explainer(self, handler):
        return ChatCompletionExplainer(
            api_key="sk-test-key",
            base_url="https://llm.local/v1/",
            model="test-model",
            transport=httpx.MockTransport(handler),
        )

    def _explain(self, explainer, status=PaymentStatus.SUCCESS, provider=Provider.PAYPAL):
        return asyncio.run(explainer.explain(make_data(), _result(), provider, status))

    def test_returns_trimmed_content(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion("  Routed to PayPal.  "))

        assert self._explain(self._explainer(handler)) == "Routed to PayPal."
        assert seen["url"] == "https://llm.local/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test-key"
        assert seen["body"]["model"] == "test-model"
        assert seen["body"]["max_tokens"] == 150
        assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user"]

    def test_empty_content_uses_fallback(self):
        explainer = self._explainer(lambda request: httpx.Response(200, json=_completion("   ")))
        assert self._explain(explainer).startswith("This payment was routed to paypal")

    def test_http_error(self):
        explainer = self._explainer(lambda request: httpx.Response(500, json={"error": "boom"}))
        with pytest.raises(ExplanationError, match="500"):
            self._explain(explainer)

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ExplanationError, match="timeout"):
            self._explain(self._explainer(handler))

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ExplanationError):
            self._explain(self._explainer(handler))

    def test_malformed_response(self):
        explainer = self._explainer(lambda request: httpx.Response(200, json={"choices": []}))
        with pytest.raises(ExplanationError, match="Invalid"):
            self._explain(explainer)

    @pytest.mark.parametrize("content", [[{"type": "text", "text": "hi"}], 42])
    def test_non_text_content(self, content):
        explainer = self._explainer(lambda request: httpx.Response(200, json=_completion(content)))
        with pytest.raises(ExplanationError, match="not text"):
            self._explain(explainer)


class CountingExplainer:
    def __init__(self, fail_times=0):
        self.calls = 0
        self.fail_times = fail_times

    async def explain(self, data, result, provider, status):
        self.calls += 1
        if self.calls <= self.fail_times:
            raise ExplanationError("unavailable")
        return f"explanation {self.calls}"


class TestCachedExplainer:
    def _explain(self, explainer, amount=10.25):
        return asyncio.run(
            explainer.explain(make_data(amount=amount), _result(), Provider.PAYPAL, PaymentStatus.SUCCESS)
        )

    def test_cache_hit(self):
        inner = CountingExplainer()
        cached = CachedExplainer(inner)
        assert self._explain(cached) == "explanation 1"
        assert self._explain(cached) == "explanation 1"
        assert inner.calls == 1

    def test_different_decisions_not_shared(self):
        inner = CountingExplainer()
        cached = CachedExplainer(inner)
        self._explain(cached, amount=10.25)
        self._explain(cached, amount=20.25)
        assert inner.calls == 2

    def test_failures_not_cached(self):
        inner = CountingExplainer(fail_times=1)
        cached = CachedExplainer(inner)
        with pytest.raises(ExplanationError):
            self._explain(cached)
        assert self._explain(cached) == "explanation 2"
        assert len(cached) == 1

    def test_eviction(self):
        cached = CachedExplainer(CountingExplainer(), max_size=3, evict_count=2)
        for amount in (1.25, 2.25, 3.25):
            self._explain(cached, amount=amount)
        assert len(cached) == 3
        self._explain(cached, amount=4.25)
        assert len(cached) == 2

    def test_cache_key(self):
        key = CachedExplainer.cache_key(
            make_data(amount=10.25, email="a@shop.com"), _result(), Provider.PAYPAL, PaymentStatus.SUCCESS
        )
        assert key == "10.25-USD-shop.com-0.35-paypal-success"

    def test_clear(self):
        cached = CachedExplainer(CountingExplainer())
        self._explain(cached)
        cached.clear()
        assert len(cached) == 0
