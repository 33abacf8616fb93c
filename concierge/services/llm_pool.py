"""LLM client pool for shared model access with concurrency control."""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Union

from loguru import logger
from openai import AsyncAzureOpenAI, AsyncOpenAI

from concierge.config import AzureOpenAIConfig, OpenAIConfig

ProviderConfig = Union[OpenAIConfig, AzureOpenAIConfig]


class LLMPool:
    """Manages shared LLM clients with concurrency limiting."""

    def __init__(self) -> None:
        self._configs: Dict[str, ProviderConfig] = {}
        self._clients: Dict[str, Any] = {}
        self._semaphores: Dict[str, asyncio.Semaphore] = {}

    def register_openai(self, name: str, config: OpenAIConfig) -> None:
        """Register an OpenAI model configuration."""
        self._register(name, config)

    def register_azure_openai(self, name: str, config: AzureOpenAIConfig) -> None:
        """Register an Azure OpenAI deployment configuration."""
        self._register(name, config)

    def register_client(self, name: str, client: Any, max_concurrent: int = 50) -> None:
        """Register an already constructed client (e.g. a shared ``AsyncOpenAI``)."""
        self._clients[name] = client
        self._semaphores[name] = asyncio.Semaphore(max_concurrent)

    def _register(self, name: str, config: ProviderConfig) -> None:
        self._configs[name] = config
        self._clients.pop(name, None)
        self._semaphores[name] = asyncio.Semaphore(config.max_concurrent)

    def __contains__(self, model_name: str) -> bool:
        return model_name in self._semaphores

    @asynccontextmanager
    async def acquire(self, model_name: str) -> AsyncIterator[Any]:
        """Acquire access to a model client with concurrency control."""
        if model_name not in self._semaphores:
            raise KeyError(f"Model '{model_name}' not registered in LLM pool")

        async with self._semaphores[model_name]:
            # Lazy initialization on first use
            if model_name not in self._clients:
                self._clients[model_name] = self._build_client(model_name)
            yield self._clients[model_name]

    def _build_client(self, model_name: str) -> Any:
        config = self._configs[model_name]
        logger.debug("Creating {} client for model {}", type(config).__name__, model_name)
        if isinstance(config, AzureOpenAIConfig):
            return AsyncAzureOpenAI(
                api_key=config.api_key,
                api_version=config.api_version,
                azure_endpoint=config.endpoint,
            )
        return AsyncOpenAI(api_key=config.api_key, base_url=config.base_url)

    async def close(self) -> None:
        """Close every client created so far."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            close = getattr(client, "close", None)
            if close is not None:
                await close()
