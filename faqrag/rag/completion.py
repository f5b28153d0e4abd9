"""Completion invoker with fixed generation parameters."""
import structlog

from faqrag import config
from faqrag.llm_client import OpenAIClient

logger = structlog.get_logger()


class CompletionInvoker:
    """Submits prompts to the completions API and returns the raw answer."""

    def __init__(
        self,
        client: OpenAIClient = None,
        model: str = None,
        max_tokens: int = None,
        temperature: float = None,
    ):
        self.client = client or OpenAIClient()
        self.model = model or config.COMPLETIONS_MODEL
        self.max_tokens = config.COMPLETION_MAX_TOKENS if max_tokens is None else max_tokens
        self.temperature = config.COMPLETION_TEMPERATURE if temperature is None else temperature

    async def complete(self, prompt: str) -> str:
        """Return the generated answer for ``prompt``.

        Raises:
            ServiceFailure: If the request fails; there is no retry
        """
        answer = await self.client.completion(
            prompt,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        logger.debug("completion_received", answer_length=len(answer))
        return answer
