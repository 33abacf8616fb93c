"""Application runtime composition helpers."""
from __future__ import annotations

from functools import lru_cache

from loguru import logger

from concierge.agents.classifier import IntentClassifier
from concierge.agents.root_agent import RootAgent, default_root_config
from concierge.agents.specialist import SpecialistAgent, specialist_config
from concierge.agents.summarizer import ConversationSummarizer
from concierge.config import Config, config
from concierge.core.models import CapabilityKind, LLMSettings
from concierge.orchestration.registry import AgentRegistry
from concierge.services.completion import CompletionService, OpenAICompletionService
from concierge.services.llm_pool import LLMPool


def build_llm_pool(settings: Config) -> LLMPool:
    pool = LLMPool()
    for model in settings.models.all():
        # Azure deployments take precedence when both are configured.
        if settings.azure_openai:
            pool.register_azure_openai(model, settings.azure_openai)
        elif settings.openai:
            pool.register_openai(model, settings.openai)
    if not settings.azure_openai and not settings.openai:
        logger.warning("No LLM provider configured; every turn will use fallbacks")
    return pool


def build_root_agent(settings: Config, completion: CompletionService) -> RootAgent:
    """Wire the root agent and register the configured specialists."""
    registry = AgentRegistry()
    root = RootAgent(
        default_root_config(settings.models.root),
        completion,
        registry=registry,
        classifier=IntentClassifier(
            completion,
            LLMSettings(model=settings.models.classifier, temperature=0.1, max_tokens=500),
        ),
        summarizer=ConversationSummarizer(
            completion,
            LLMSettings(model=settings.models.summary, temperature=0.3, max_tokens=100),
        ),
    )

    for name in settings.specialists:
        try:
            kind = CapabilityKind[name.upper()]
        except KeyError:
            logger.warning("Ignoring unknown specialist capability '{}'", name)
            continue
        if kind is CapabilityKind.ROOT:
            logger.warning("Ignoring root capability in specialist list")
            continue
        root.register_agent(SpecialistAgent(specialist_config(kind, settings.models.root), completion))
    return root


@lru_cache
def get_llm_pool() -> LLMPool:
    return build_llm_pool(config)


@lru_cache
def get_completion_service() -> OpenAICompletionService:
    root_config = default_root_config(config.models.root)
    return OpenAICompletionService(
        get_llm_pool(),
        timeout=root_config.timeout,
        retry_attempts=root_config.retry_attempts,
    )


@lru_cache
def get_root_agent() -> RootAgent:
    return build_root_agent(config, get_completion_service())


async def initialize_agents() -> RootAgent:
    """Activate the root agent and every registered specialist on startup."""
    root = get_root_agent()
    await root.initialize()
    for agent in root.registry:
        await agent.initialize()
    return root


async def shutdown_agents() -> None:
    root = get_root_agent()
    for agent in root.registry:
        await agent.shutdown()
    await root.shutdown()
    await get_llm_pool().close()
