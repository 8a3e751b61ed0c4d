"""
Rejuvenator Base Agent

Shared plumbing for the pipeline stages that talk to the generative service:
configuration, the injected client, budget truncation and execution logging.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Protocol, Sequence, Type, Union

from pydantic import BaseModel

from rejuvenator.core.constants import ModelTier
from rejuvenator.core.logging_config import get_logger
from rejuvenator.llm.api_clients import ContentPart, ImageResponse, TextResponse

logger = get_logger("agents.base")


class GenerativeClient(Protocol):
    """The generative-service surface the agents depend on."""

    async def generate_text(
        self, prompt: Union[str, Sequence[ContentPart]], model: str
    ) -> TextResponse: ...

    async def generate_structured(
        self, prompt: Union[str, Sequence[ContentPart]], model: str, schema: Type[BaseModel]
    ) -> TextResponse: ...

    async def generate_image(
        self, parts: Sequence[ContentPart], model: str, aspect_ratio: str = "16:9"
    ) -> ImageResponse: ...


@dataclass
class AgentConfig:
    """Configuration for an agent."""
    name: str
    description: str
    model: str
    tier: ModelTier = ModelTier.FLASH


def truncate(text: str, limit: int) -> str:
    """Hard character cap used for every context-window budget."""
    return (text or "")[:max(limit, 0)]


class BaseAgent:
    """
    Base class for generative pipeline stages.

    Provides:
    - The injected GenerativeClient
    - Execution history with timings
    - Budget truncation
    """

    def __init__(self, config: AgentConfig, client: GenerativeClient):
        self.config = config
        self.client = client
        self._execution_history: List[Dict[str, Any]] = []

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def model(self) -> str:
        return self.config.model

    @property
    def execution_history(self) -> List[Dict[str, Any]]:
        return list(self._execution_history)

    def _log_execution(
        self,
        prompt_length: int,
        response_length: int,
        started: datetime,
        success: bool
    ) -> None:
        """Log execution details."""
        execution_time = (datetime.now() - started).total_seconds()
        self._execution_history.append({
            'timestamp': datetime.now().isoformat(),
            'model': self.model,
            'prompt_length': prompt_length,
            'response_length': response_length,
            'execution_time': execution_time,
            'success': success,
        })
        logger.debug(
            f"{self.name} [{self.model}] executed in {execution_time:.2f}s "
            f"(success={success})"
        )
