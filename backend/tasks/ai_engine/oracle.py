# tasks/ai_engine/oracle.py
"""
Scoring Oracle
==============

The only place in the system that talks to a generative-AI provider.

Two layers:

- `OpenAIProvider`: thin wrapper over the OpenAI Chat Completions API. It
  turns every SDK failure into a `ProviderError` tagged with a
  `ProviderErrorKind`, so the retry policy never inspects error strings.
- `ScoringOracle`: prompt construction, model fallover and response
  validation. It holds no persistence dependencies; the provider and the
  sleep function are injected, which is what the test-suite fakes.

Fallover policy:
----------------
Candidates are tried strictly in list order. A RATE_LIMITED error retries
the SAME candidate up to `max_quota_retries` more times, waiting
backoff, 2*backoff, ... seconds. Any other error (or an exhausted retry
budget) moves to the next candidate immediately. The first response that
parses (and passes the optional validator) wins. When nothing wins,
`OracleExhaustedError` is raised and the caller falls back to heuristics.
"""

from __future__ import annotations

import functools
import json
import logging
import math
import re
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from django.conf import settings
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    OpenAI,
    OpenAIError,
    RateLimitError,
)

from .exceptions import OracleExhaustedError, ProviderError, ProviderErrorKind
from .features import BurnoutFeatures, TaskFeatures
from .rules import clamp_score, risk_level_for

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class OpenAIProvider:
    """
    Generation provider backed by the OpenAI Chat Completions API.

    Uses deferred configuration: a missing API key does not raise here.
    Instead `generate_content` fails with a TRANSPORT error, which makes
    every candidate fail fast and routes callers to their fallback.
    """

    DEFAULT_TEMPERATURE: float = 0.2
    DEFAULT_MAX_TOKENS: int = 1024

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        **client_kwargs: Any,
    ) -> None:
        self.timeout: float = timeout or getattr(settings, "AI_REQUEST_TIMEOUT", 30.0)
        self.client: Optional[OpenAI] = None
        self.is_configured: bool = False
        self.configuration_error: Optional[str] = None

        resolved_key = api_key or getattr(settings, "OPENAI_API_KEY", None) or ""
        if not resolved_key:
            self.configuration_error = (
                "OPENAI_API_KEY is not configured. "
                "Set the OPENAI_API_KEY environment variable or Django setting."
            )
            logger.warning(f"OpenAIProvider: {self.configuration_error}")
            return

        try:
            # Retries are owned by the oracle, not the SDK
            self.client = OpenAI(api_key=resolved_key, max_retries=0, **client_kwargs)
            self.is_configured = True
        except OpenAIError as e:
            self.configuration_error = f"Failed to initialize OpenAI client: {e}"
            logger.error(f"OpenAIProvider: {self.configuration_error}")

    def generate_content(self, model_id: str, prompt: str) -> str:
        """Send one prompt to one model and return the raw text."""
        if not self.is_configured or self.client is None:
            raise ProviderError(
                ProviderErrorKind.TRANSPORT,
                self.configuration_error or "Provider not configured",
            )

        try:
            response = self.client.chat.completions.create(
                model=model_id,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.DEFAULT_TEMPERATURE,
                max_tokens=self.DEFAULT_MAX_TOKENS,
                response_format={"type": "json_object"},
                timeout=self.timeout,
            )
        except RateLimitError as e:
            raise ProviderError(ProviderErrorKind.RATE_LIMITED, str(e)) from e
        except APITimeoutError as e:
            raise ProviderError(ProviderErrorKind.TRANSPORT, f"timeout: {e}") from e
        except APIConnectionError as e:
            raise ProviderError(ProviderErrorKind.TRANSPORT, f"connection error: {e}") from e
        except APIStatusError as e:
            raise ProviderError(
                ProviderErrorKind.TRANSPORT, f"status {e.status_code}: {e}"
            ) from e
        except OpenAIError as e:
            raise ProviderError(ProviderErrorKind.TRANSPORT, str(e)) from e

        if not response.choices:
            raise ProviderError(ProviderErrorKind.INVALID_RESPONSE, "No choices in response")

        content = response.choices[0].message.content or ""
        if not content.strip():
            raise ProviderError(ProviderErrorKind.INVALID_RESPONSE, "Empty response from AI")
        return content


@functools.lru_cache(maxsize=1)
def get_provider() -> OpenAIProvider:
    """Process-wide provider, built once and injected into oracles."""
    return OpenAIProvider()


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------


def strip_code_fences(text: str) -> str:
    """Remove Markdown ``` / ```json wrapping around a JSON payload."""
    return _FENCE_RE.sub("", text or "").strip()


def parse_json_response(text: str) -> Any:
    """Strip fences and decode; raises json.JSONDecodeError on garbage."""
    return json.loads(strip_code_fences(text))


def normalize_burnout_response(
    data: Any,
    features: BurnoutFeatures,
) -> Dict[str, Any]:
    """
    Coerce an oracle burnout payload into the stored result shape.

    Raises:
        ValueError: if the payload is not an object with a numeric score.
    """
    if not isinstance(data, dict):
        raise ValueError("Burnout response must be a JSON object")

    raw_score = data.get("score")
    if isinstance(raw_score, bool) or raw_score is None:
        raise ValueError("Burnout response is missing a numeric score")
    try:
        value = float(raw_score)
    except (TypeError, ValueError):
        raise ValueError(f"Burnout score is not numeric: {raw_score!r}")
    if not math.isfinite(value):
        raise ValueError(f"Burnout score is not finite: {raw_score!r}")
    score = clamp_score(round(value))

    recommendations = data.get("recommendations") or []
    if isinstance(recommendations, str):
        recommendations = [recommendations]
    elif not isinstance(recommendations, list):
        recommendations = []

    return {
        "score": score,
        "riskLevel": risk_level_for(score),
        # Always the snapshot we computed, never the model's echo of it
        "factors": features.to_factors(),
        "analysis": str(data.get("analysis") or ""),
        "recommendations": [str(r) for r in recommendations if r is not None],
    }


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def build_burnout_prompt(features: BurnoutFeatures, user_name: str, user_id) -> str:
    factors = features.to_factors()
    commit_messages = "\n- ".join(features.recent_commit_messages) or "No commits found"

    return f"""You are an expert in workplace burnout analysis. Analyze the following data and calculate a burnout risk score from 0-100.

**Developer Information:**
- Name: {user_name or 'Unknown'}
- User ID: {user_id}

**GitHub Activity (last 30 days):**
- Total Commits: {features.commits_count}
- Pull Requests: {features.pull_requests_count}
- Issues: {features.issues_count}
- Recent Commit Messages:
- {commit_messages}

**Task Statistics:**
- Tasks In Progress: {features.tasks_in_progress}
- Completed Tasks: {features.completed_tasks}
- Overdue Tasks: {features.overdue_tasks}
- Total Tasks: {features.total_tasks}

**Analysis Instructions:**
1. Consider commit frequency and patterns (too many or too few can indicate stress)
2. Analyze commit messages for signs of stress, urgency, or frustration
3. Evaluate workload balance (tasks in progress vs completed)
4. Consider overdue tasks as a stress indicator
5. Look for patterns suggesting overwork or disengagement

**Response Format (MUST BE VALID JSON):**
{{
  "score": <number 0-100>,
  "riskLevel": "<low|medium|high>",
  "factors": {json.dumps(factors)},
  "analysis": "<brief explanation>",
  "recommendations": ["<recommendation 1>", "<recommendation 2>", "<recommendation 3>"]
}}

Respond ONLY with valid JSON, no additional text."""


def build_prioritizer_prompt(records: Sequence[TaskFeatures]) -> str:
    payload = json.dumps([r.to_prompt_dict() for r in records], indent=2)
    last_index = len(records) - 1

    return f"""You are a task management AI assistant. Analyze the following tasks and provide an optimal order for completing them.

Consider these factors in your analysis:
1. Priority level (high, medium, low)
2. Time until deadline (hours/days remaining)
3. Whether the task is already in progress
4. Whether the task is overdue
5. Estimated hours to complete
6. Project context

Tasks to analyze:
{payload}

IMPORTANT: You MUST respond with ONLY a valid JSON object in this exact format, with no additional text before or after:
{{
  "sortedIndices": [array of task indices in recommended order],
  "reasoning": "Brief explanation of the sorting logic"
}}

The sortedIndices array should contain the index numbers (0-{last_index}) of the tasks in the recommended order, each exactly once."""


# ---------------------------------------------------------------------------
# Oracle
# ---------------------------------------------------------------------------


class ScoringOracle:
    """
    Multi-model JSON oracle.

    Attributes:
        provider: object exposing `generate_content(model_id, prompt) -> str`.
        burnout_models: ordered candidates for burnout scoring.
        prioritizer_models: ordered candidates for task ordering.
        max_quota_retries: extra attempts per candidate on RATE_LIMITED.
        backoff_seconds: base backoff; attempt n waits n * backoff_seconds.
    """

    def __init__(
        self,
        provider=None,
        burnout_models: Optional[Sequence[str]] = None,
        prioritizer_models: Optional[Sequence[str]] = None,
        max_quota_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.provider = provider if provider is not None else get_provider()
        self.burnout_models: List[str] = list(
            burnout_models if burnout_models is not None
            else getattr(settings, "AI_BURNOUT_MODELS", [])
        )
        self.prioritizer_models: List[str] = list(
            prioritizer_models if prioritizer_models is not None
            else getattr(settings, "AI_PRIORITIZER_MODELS", [])
        )
        self.max_quota_retries: int = (
            max_quota_retries if max_quota_retries is not None
            else getattr(settings, "AI_QUOTA_MAX_RETRIES", 2)
        )
        self.backoff_seconds: float = (
            backoff_seconds if backoff_seconds is not None
            else getattr(settings, "AI_QUOTA_BACKOFF_SECONDS", 2.0)
        )
        self.sleep = sleep

    def generate_json(
        self,
        prompt: str,
        candidates: Sequence[str],
        validate: Optional[Callable[[Any], Any]] = None,
    ) -> Tuple[Any, str]:
        """
        Run the fallover loop and return (payload, model_id).

        `validate` may transform the parsed payload; raising ValueError
        rejects the response and moves on to the next candidate.

        Raises:
            OracleExhaustedError: no candidate produced an accepted payload.
        """
        last_error: Optional[BaseException] = None

        for model_id in candidates:
            attempt = 0
            while True:
                logger.info(f"Oracle: trying model {model_id} (attempt {attempt + 1})")
                try:
                    text = self.provider.generate_content(model_id, prompt)
                except ProviderError as e:
                    last_error = e
                    logger.warning(f"Oracle: model {model_id} failed ({e.kind.value}): {e}")
                    if e.is_rate_limited and attempt < self.max_quota_retries:
                        attempt += 1
                        wait = self.backoff_seconds * attempt
                        logger.info(f"Oracle: rate limited, waiting {wait:.1f}s before retrying {model_id}")
                        self.sleep(wait)
                        continue
                    break
                except Exception as e:
                    last_error = e
                    logger.exception(f"Oracle: unexpected error from model {model_id}: {e}")
                    break

                try:
                    payload = parse_json_response(text)
                    if validate is not None:
                        payload = validate(payload)
                except (json.JSONDecodeError, ValueError, RecursionError) as e:
                    last_error = e
                    logger.warning(f"Oracle: unusable response from {model_id}: {e}")
                    break

                logger.info(f"Oracle: model {model_id} succeeded")
                return payload, model_id

        raise OracleExhaustedError(list(candidates), last_error)

    def score_burnout(
        self,
        features: BurnoutFeatures,
        user_name: str,
        user_id=None,
    ) -> Dict[str, Any]:
        """
        Ask the candidate models for a burnout assessment.

        Returns:
            {score, riskLevel, factors, analysis, recommendations, modelUsed}

        Raises:
            OracleExhaustedError
        """
        prompt = build_burnout_prompt(features, user_name, user_id)
        result, model_id = self.generate_json(
            prompt,
            self.burnout_models,
            validate=lambda data: normalize_burnout_response(data, features),
        )
        result["modelUsed"] = model_id
        return result

    def rank_tasks(self, records: Sequence[TaskFeatures]) -> Tuple[Any, str, str]:
        """
        Ask for an ordering of `records`.

        Returns the raw (unvalidated) sortedIndices, the reasoning text and
        the model that answered. Permutation checks belong to the caller.

        Raises:
            OracleExhaustedError
        """
        prompt = build_prioritizer_prompt(records)
        payload, model_id = self.generate_json(prompt, self.prioritizer_models)
        if not isinstance(payload, dict):
            return payload, "", model_id
        return payload.get("sortedIndices"), str(payload.get("reasoning") or ""), model_id
