"""Natural-language explanations for routing decisions.

The explanation service is an external chat-completion API. Calls to it
may fail or time out; callers fall back to `fallback_explanation`, a
deterministic sentence built from the risk result alone.
"""

import logging
from collections import OrderedDict
from typing import Optional, Protocol

import httpx

from app.exceptions import ExplanationError
from app.models import FraudAnalysisData, PaymentStatus, Provider, RiskResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a fraud detection expert. Generate clear, concise explanations "
    "for payment routing decisions. Be professional and informative."
)


class Explainer(Protocol):
    async def explain(
        self,
        data: FraudAnalysisData,
        result: RiskResult,
        provider: Provider,
        status: PaymentStatus,
    ) -> str:
        ...


def risk_level(score: float) -> str:
    if score < 0.3:
        return "low"
    if score < 0.7:
        return "moderate"
    return "high"


def fallback_explanation(result: RiskResult, provider: Provider, status: PaymentStatus) -> str:
    """Deterministic explanation used when no generated text is available."""
    outcome = "blocked" if status == PaymentStatus.BLOCKED else f"routed to {provider.value}"
    return (
        f"This payment was {outcome} due to a {risk_level(result.risk_score)} "
        f"risk score ({result.risk_score:.2f}) based on "
        f"{', '.join(result.triggered_rules)}."
    )


def build_prompt(
    data: FraudAnalysisData,
    result: RiskResult,
    provider: Provider,
    status: PaymentStatus,
) -> str:
    if result.triggered_rules:
        rules_text = f"Triggered rules: {', '.join(result.triggered_rules)}"
    else:
        rules_text = "No specific risk factors detected"
    action = "blocked" if status == PaymentStatus.BLOCKED else "processed"

    return (
        "Payment Transaction Analysis:\n"
        f"- Amount: {data.currency} {data.amount}\n"
        f"- Email: {data.email}\n"
        f"- Domain: {data.domain}\n"
        f"- Risk Score: {result.risk_score:.2f}\n"
        f"- {rules_text}\n"
        f"- Provider: {provider.value}\n"
        f"- Status: {status.value}\n\n"
        "Generate a natural language explanation for this payment routing "
        f"decision. Explain why the payment was {action} and routed to "
        f"{provider.value}. Keep it under 100 words and make it human-readable."
    )


class ChatCompletionExplainer:
    """Explainer backed by an OpenAI-compatible chat-completions endpoint"""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-3.5-turbo",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.transport = transport

    async def explain(
        self,
        data: FraudAnalysisData,
        result: RiskResult,
        provider: Provider,
        status: PaymentStatus,
    ) -> str:
        """
        Ask the completion endpoint for an explanation.

        Raises:
            ExplanationError: On timeout, HTTP errors, or invalid response
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(data, result, provider, status)},
            ],
            "max_tokens": 150,
            "temperature": 0.7,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                content = response.json()["choices"][0]["message"]["content"]
                if content is not None and not isinstance(content, str):
                    raise TypeError(f"content is {type(content).__name__}, not text")
            except httpx.TimeoutException as e:
                raise ExplanationError(f"Explanation API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ExplanationError(f"Explanation API error: {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise ExplanationError(f"Explanation API unreachable: {e}") from e
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise ExplanationError(f"Invalid explanation response: {e}") from e

        text = (content or "").strip()
        return text or fallback_explanation(result, provider, status)


class CachedExplainer:
    """Caches explanations of another explainer by decision signature.

    Only successful explanations are cached. Once the cache grows past
    `max_size` the oldest `evict_count` entries are dropped.
    """

    def __init__(self, inner: Explainer, max_size: int = 100, evict_count: int = 20):
        self.inner = inner
        self.max_size = max_size
        self.evict_count = evict_count
        self._cache: "OrderedDict[str, str]" = OrderedDict()

    @staticmethod
    def cache_key(
        data: FraudAnalysisData,
        result: RiskResult,
        provider: Provider,
        status: PaymentStatus,
    ) -> str:
        return (
            f"{data.amount}-{data.currency}-{data.domain}-"
            f"{result.risk_score:.2f}-{provider.value}-{status.value}"
        )

    async def explain(
        self,
        data: FraudAnalysisData,
        result: RiskResult,
        provider: Provider,
        status: PaymentStatus,
    ) -> str:
        key = self.cache_key(data, result, provider, status)
        cached = self._cache.get(key)
        if cached:
            return cached

        explanation = await self.inner.explain(data, result, provider, status)
        self._cache[key] = explanation
        self._cleanup()
        return explanation

    def _cleanup(self) -> None:
        if len(self._cache) > self.max_size:
            for _ in range(min(self.evict_count, len(self._cache))):
                self._cache.popitem(last=False)

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
