"""Text-completion boundary used by every agent.

Completion calls never raise: they return a :class:`Completion` that is either
a success carrying text or a failure carrying a reason.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol

from loguru import logger

from concierge.core.models import LLMSettings
from concierge.services.llm_pool import LLMPool


@dataclass(frozen=True, slots=True)
class Completion:
    ok: bool
    text: str = ""
    error: Optional[str] = None

    @classmethod
    def success(cls, text: Optional[str]) -> Completion:
        return cls(ok=True, text=(text or "").strip())

    @classmethod
    def failure(cls, reason: str) -> Completion:
        return cls(ok=False, error=reason)


class CompletionService(Protocol):
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        settings: LLMSettings,
    ) -> Completion:
        ...


class OpenAICompletionService:
    """Chat-completions client with per-call deadline and retry with backoff."""

    def __init__(
        self,
        pool: LLMPool,
        *,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        backoff_factor: float = 0.5,
    ) -> None:
        self._pool = pool
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.backoff_factor = backoff_factor

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        settings: LLMSettings,
    ) -> Completion:
        last_error = ""
        for attempt in range(self.retry_attempts):
            try:
                text = await self._call(system_prompt, user_prompt, settings)
                return Completion.success(text)
            except KeyError as exc:
                # Unknown model: retrying cannot help.
                return Completion.failure(str(exc))
            except asyncio.TimeoutError:
                last_error = f"completion timed out after {self.timeout}s"
            except Exception as exc:  # noqa: BLE001
                last_error = str(exc) or type(exc).__name__

            logger.warning(
                "Completion attempt {}/{} failed for model {}: {}",
                attempt + 1,
                self.retry_attempts,
                settings.model,
                last_error,
            )
            if attempt < self.retry_attempts - 1:
                await asyncio.sleep(self.backoff_factor * (2**attempt))

        return Completion.failure(f"Failed after {self.retry_attempts} attempts: {last_error}")

    async def _call(self, system_prompt: str, user_prompt: str, settings: LLMSettings) -> Optional[str]:
        async with self._pool.acquire(settings.model) as client:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=settings.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    temperature=settings.temperature,
                    max_tokens=settings.max_tokens,
                ),
                timeout=self.timeout,
            )
        if not response.choices:
            return None
        return response.choices[0].message.content
