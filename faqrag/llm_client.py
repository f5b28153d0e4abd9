"""OpenAI-compatible API client wrapper with error handling."""
import httpx
from typing import Dict, Optional
import structlog

from faqrag import config
from faqrag.exceptions import ServiceFailure

logger = structlog.get_logger()


class OpenAIClient:
    """Async client for the embeddings and completions endpoints."""

    def __init__(
        self,
        base_url: str = None,
        api_key: str = None,
        organization: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the API client.

        Args:
            base_url: API base URL (defaults to config.OPENAI_BASE_URL)
            api_key: Bearer token (defaults to config.OPENAI_API_KEY)
            organization: Optional organization header (defaults to config)
            timeout: Request timeout in seconds (defaults to config.REQUEST_TIMEOUT)
            transport: Optional httpx transport, mainly for tests
        """
        self.base_url = (base_url or config.OPENAI_BASE_URL).rstrip("/")
        self.api_key = api_key or config.OPENAI_API_KEY
        self.organization = organization or config.OPENAI_ORGANIZATION
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers

    async def _post(self, service: str, path: str, payload: Dict) -> Dict:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}{path}",
                    json=payload,
                    headers=self._headers(),
                )
                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                "api_http_error",
                service=service,
                error=str(e),
                status_code=status_code,
            )
            raise ServiceFailure(
                f"{service} request failed with status {status_code}",
                service=service,
                status_code=status_code,
            ) from e
        except httpx.ConnectError as e:
            logger.error("api_connection_error", service=service, error=str(e), base_url=self.base_url)
            raise ServiceFailure(
                f"Cannot reach {self.base_url}: {e}", service=service
            ) from e
        except httpx.HTTPError as e:
            logger.error("api_request_error", service=service, error=str(e), error_type=type(e).__name__)
            raise ServiceFailure(f"{service} request failed: {e}", service=service) from e
        except ValueError as e:
            logger.error("api_invalid_json", service=service, error=str(e))
            raise ServiceFailure(f"{service} returned invalid JSON", service=service) from e

    async def embeddings(
        self,
        text: str,
        model: str = None,
    ) -> Dict:
        """Generate an embedding for a text.

        Args:
            text: Text to embed
            model: Model to use (defaults to config.EMBEDDING_MODEL)

        Returns:
            Dict with 'embedding' (list of floats) and 'tokens' (int)

        Raises:
            ServiceFailure: On API errors or a malformed response
        """
        model = model or config.EMBEDDING_MODEL

        logger.debug("embedding_request", model=model, text_length=len(text))

        data = await self._post("embeddings", "/embeddings", {"input": text, "model": model})

        try:
            embedding = [float(x) for x in data["data"][0]["embedding"]]
            tokens = int((data.get("usage") or {}).get("total_tokens", 0))
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            logger.error("embedding_response_malformed", model=model, error=str(e))
            raise ServiceFailure("Malformed embeddings response", service="embeddings") from e

        if not embedding:
            raise ServiceFailure("Empty embedding returned", service="embeddings")

        logger.debug(
            "embedding_response",
            model=model,
            dimension=len(embedding),
            tokens=tokens,
        )

        return {"embedding": embedding, "tokens": tokens}

    async def completion(
        self,
        prompt: str,
        model: str = None,
        max_tokens: int = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Send a text completion request.

        Args:
            prompt: Full prompt text
            model: Model to use (defaults to config.COMPLETIONS_MODEL)
            max_tokens: Maximum generated tokens (defaults to config)
            temperature: Sampling temperature (defaults to config)

        Returns:
            Generated text of the first choice

        Raises:
            ServiceFailure: On API errors or a malformed response
        """
        model = model or config.COMPLETIONS_MODEL
        if max_tokens is None:
            max_tokens = config.COMPLETION_MAX_TOKENS
        if temperature is None:
            temperature = config.COMPLETION_TEMPERATURE

        payload = {
            "model": model,
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        logger.info(
            "completion_request",
            model=model,
            prompt_length=len(prompt),
            max_tokens=max_tokens,
        )

        data = await self._post("completions", "/completions", payload)

        try:
            text = data["choices"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            logger.error("completion_response_malformed", model=model, error=str(e))
            raise ServiceFailure("Malformed completions response", service="completions") from e

        if not isinstance(text, str):
            logger.error("completion_response_malformed", model=model, error="text is not a string")
            raise ServiceFailure("Malformed completions response", service="completions")

        logger.info("completion_response", model=model, response_length=len(text))

        return text
