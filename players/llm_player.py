"""
LLM-backed decision provider using LiteLLM.

Sends the rules (system prompt) and the day's situation (user prompt) to
any model LiteLLM can route to, in JSON mode, and validates the reply
against the action schema. Usage (tokens, cost, wall time) is returned
with every decision rather than accumulated in module globals.
"""

import asyncio
import json
import logging
import re
import time
from pathlib import Path
from typing import Any

import litellm
from pydantic import ValidationError

from engine.action_parser import AlchemistName, parse_action
from engine.errors import ActionSchemaError, DecisionError
from engine.state import Usage
from players.base import DecisionProvider, DecisionRequest, DecisionResult
from players.prompt_builder import NAME_PROMPT, PromptBuilder

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 25


class LLMPlayer(DecisionProvider):
    """
    LLM-powered participant.

    Models supported: anything LiteLLM supports, e.g.
    - gpt-4o-mini / gpt-4o (OpenAI)
    - anthropic/claude-3-5-haiku-20241022
    - groq/llama-3.1-8b-instant
    """

    def __init__(
        self,
        name: str,
        model: str,
        strategy: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        max_retries: int = 1,
        rate_limit_retries: int = 5,
        rate_limit_base_delay: float = 4.0,
        request_timeout: float = 60.0,
        history_days: int = 3,
        output_dir: str | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize LLM player.

        Args:
            name: Display name
            model: LiteLLM model id
            strategy: Optional strategy text appended to the system prompt
            temperature: Sampling temperature
            max_tokens: Completion token cap
            max_retries: Attempts per decision when the reply fails the
                schema (1 = no retry; the last failure propagates)
            rate_limit_retries: Attempts on litellm.RateLimitError
            rate_limit_base_delay: Initial backoff in seconds (doubles)
            request_timeout: Per-call timeout passed to LiteLLM
            history_days: Own past days described in the prompt
            output_dir: Directory to save prompts/responses (None = no logging)
            **kwargs: Extra arguments forwarded to litellm.acompletion
        """
        super().__init__(name)
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        self.model = model
        self.strategy = strategy
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.rate_limit_retries = rate_limit_retries
        self.rate_limit_base_delay = rate_limit_base_delay
        self.request_timeout = request_timeout
        self.history_days = history_days
        self.completion_kwargs = kwargs

        self.prompt_builder = PromptBuilder()
        self.system_prompt = self.prompt_builder.build_system_prompt(strategy)

        self.output_dir = Path(output_dir) if output_dir else None
        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Logging prompts/responses to: {self.output_dir}")

        # Statistics
        self.invalid_action_count = 0
        self.total_decisions = 0

        logger.info(f"Initialized LLMPlayer (name={name}, model={model})")

    # =========================================================================
    # LLM CALL
    # =========================================================================

    async def _call_llm(self, messages: list[dict[str, str]]) -> tuple[str, Usage]:
        """
        Call the model with rate limit backoff.

        Returns:
            (response text, usage of this call)

        Raises:
            DecisionError: On empty content
            litellm exceptions: When the call fails for other reasons
        """
        for attempt in range(self.rate_limit_retries):
            start = time.perf_counter()
            try:
                response = await litellm.acompletion(
                    model=self.model,
                    messages=messages,
                    temperature=self.temperature,
                    response_format={"type": "json_object"},
                    max_tokens=self.max_tokens,
                    timeout=self.request_timeout,
                    **self.completion_kwargs,
                )
            except litellm.RateLimitError:
                if attempt == self.rate_limit_retries - 1:
                    logger.error(f"Rate limit exceeded after {self.rate_limit_retries} retries")
                    raise
                delay = self.rate_limit_base_delay * (2**attempt)
                logger.warning(
                    f"Rate limit hit, retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self.rate_limit_retries})"
                )
                await asyncio.sleep(delay)
                continue

            duration_ms = (time.perf_counter() - start) * 1000
            choice = response.choices[0]
            if choice.finish_reason == "length":
                logger.warning(f"Response TRUNCATED (finish_reason=length). Model: {self.model}")

            text = choice.message.content
            usage = self._usage_from(response, duration_ms)
            if not text or not text.strip():
                raise DecisionError(f"Empty content in LLM response from {self.model}")
            logger.debug(f"RAW LLM RESPONSE: {text[:200]!r}...")
            return text, usage

        raise DecisionError(f"No response from {self.model}")

    def _usage_from(self, response: Any, duration_ms: float) -> Usage:
        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0
        total_tokens = getattr(usage, "total_tokens", 0) or input_tokens + output_tokens
        try:
            cost = float(litellm.completion_cost(completion_response=response))
        except Exception as e:
            # Unpriced or custom models
            logger.debug(f"No cost available for {self.model}: {e}")
            cost = 0.0
        return Usage(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=total_tokens,
            cost_usd=cost,
            duration_ms=duration_ms,
        )

    # =========================================================================
    # DECISIONS
    # =========================================================================

    async def decide(self, request: DecisionRequest) -> DecisionResult:
        """
        Ask the model for today's actions, retrying on schema errors.

        Raises:
            ActionSchemaError: If the last attempt still fails the schema
        """
        self.total_decisions += 1
        strategy_prompt = self.system_prompt
        if request.strategy and request.strategy != self.strategy:
            strategy_prompt = self.prompt_builder.build_system_prompt(request.strategy)
        prompt = self.prompt_builder.build_day_prompt(request, self.history_days)

        total = Usage()
        for attempt in range(1, self.max_retries + 1):
            messages = [
                {"role": "system", "content": strategy_prompt},
                {"role": "user", "content": prompt},
            ]
            text, usage = await self._call_llm(messages)
            total = _combine(total, usage)
            self._log_decision(request.day, attempt, prompt, text)

            try:
                action = parse_action(text)
            except ActionSchemaError as e:
                self.invalid_action_count += 1
                logger.warning(
                    f"Invalid action (attempt {attempt}/{self.max_retries}): {e} | "
                    f"player={self.name} model={self.model} day={request.day}"
                )
                if attempt == self.max_retries:
                    raise
                prompt = prompt + self.prompt_builder.format_error_feedback(str(e), attempt)
                continue

            logger.info(
                f"{self.name} ({self.model}) day {request.day}: {total.duration_ms:.0f}ms, "
                f"{total.input_tokens}in/{total.output_tokens}out tokens"
            )
            return DecisionResult(action=action, usage=total, reasoning=_reasoning_of(text))

        raise DecisionError("unreachable: retry loop exited without result")

    async def choose_name(self) -> str | None:
        """Ask the model for a short alchemist name; 'Unnamed' if unusable."""
        text, _ = await self._call_llm([{"role": "user", "content": NAME_PROMPT}])
        try:
            chosen = AlchemistName.model_validate_json(text).alchemist_name
        except ValidationError as e:
            logger.warning(f"Unusable name response from {self.model}: {e}")
            return "Unnamed"
        return sanitize_name(chosen)

    def _log_decision(self, day: int, attempt: int, prompt: str, response: str) -> None:
        """Write prompt and response files for debugging."""
        if not self.output_dir:
            return
        base = f"{_slug(self.name)}_day_{day:02d}_attempt_{attempt}"
        (self.output_dir / f"{base}_prompt.txt").write_text(
            f"=== SYSTEM PROMPT ===\n{self.system_prompt}\n\n=== USER PROMPT ===\n{prompt}\n"
        )
        (self.output_dir / f"{base}_response.json").write_text(
            json.dumps(
                {"player": self.name, "model": self.model, "day": day, "raw": response},
                indent=2,
            )
        )

    def get_invalid_action_rate(self) -> float:
        """Percentage of decisions that needed at least one rejected reply."""
        if self.total_decisions == 0:
            return 0.0
        return 100.0 * self.invalid_action_count / self.total_decisions


def sanitize_name(name: str) -> str:
    """Trim, strip special characters and crop a chosen name for display."""
    cleaned = re.sub(r"[^\w\s'-]", "", name.strip()).strip()
    cleaned = cleaned[:MAX_NAME_LENGTH].strip()
    return cleaned if len(cleaned) >= 2 else "Unnamed"


def _combine(a: Usage, b: Usage) -> Usage:
    return Usage(
        input_tokens=a.input_tokens + b.input_tokens,
        output_tokens=a.output_tokens + b.output_tokens,
        total_tokens=a.total_tokens + b.total_tokens,
        cost_usd=a.cost_usd + b.cost_usd,
        duration_ms=a.duration_ms + b.duration_ms,
    )


def _reasoning_of(text: str) -> str | None:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    reasoning = data.get("reasoning") if isinstance(data, dict) else None
    return reasoning if isinstance(reasoning, str) else None


def _slug(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]+", "_", name).strip("_").lower() or "player"
