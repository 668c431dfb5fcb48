"""Reasoning agent that turns instructions into GitHub actions, using pydantic-ai."""

from collections.abc import Callable
from functools import lru_cache
from typing import TypeVar

import logfire
from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.providers.anthropic import AnthropicProvider

from pr_review_agent.actions import AGENT_ACTIONS
from pr_review_agent.config import Settings, get_settings
from pr_review_agent.triggers import BOT_MARKER

# Instrument pydantic-ai with logfire for tracing LLM calls
logfire.instrument_pydantic_ai()

OutputT = TypeVar("OutputT", bound=BaseModel)

SYSTEM_PROMPT = f"""You are a GitHub assistant that reviews pull requests and answers \
questions on them.

Use the available actions to read PR files and post review comments or replies.
Always pass the full PR URL (https://github.com/owner/repo/pull/number) to actions.
Be concise. Focus on substance over style.
Every comment you post MUST start with this exact prefix: {BOT_MARKER}"""


class ReviewAgent:
    """Thin wrapper around a pydantic-ai agent with the PR actions as tools."""

    def __init__(self, agent: Agent):
        self._agent = agent

    async def run(self, instruction: str, output_type: type[OutputT]) -> OutputT:
        """Run one instruction and return the agent's structured output.

        The output schema shapes the agent's final answer; it is not checked
        against what was actually posted on GitHub.
        """
        result = await self._agent.run(instruction, output_type=output_type)
        return result.output


def create_review_agent(settings: Settings | None = None) -> ReviewAgent:
    """Build a review agent from settings."""
    settings = settings or get_settings()

    model = AnthropicModel(
        settings.anthropic_model,
        provider=AnthropicProvider(api_key=settings.anthropic_api_key),
    )
    agent = Agent(
        model,
        system_prompt=SYSTEM_PROMPT,
        tools=AGENT_ACTIONS,
    )
    return ReviewAgent(agent)


@lru_cache
def get_review_agent() -> ReviewAgent:
    """Get the shared review agent, building it on first use."""
    logfire.info("[agent] creating review agent")
    return create_review_agent()


def get_agent_provider() -> Callable[[], ReviewAgent]:
    """FastAPI dependency returning the agent getter without building the agent."""
    return get_review_agent
