"""HTTP client for the external AI roadmap-generation endpoint.

The endpoint takes ``{title, languageName}`` and answers with
``{sections: [...]}``. Failures surface as a distinct error kind per HTTP
status. Nothing is retried; the caller decides whether to try again.
"""

import httpx

from learnboard.core.config import get_settings
from learnboard.core.logging import get_logger
from learnboard.schemas.fragment import GeneratedRoadmap
from learnboard.services.payload_parser import parse_json_payload

logger = get_logger(__name__)


class GenerationError(Exception):
    """Roadmap generation failed."""

    kind = "generation_failed"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(GenerationError):
    """The generation service rejected the request with HTTP 429."""

    kind = "rate_limited"


class InsufficientBalanceError(GenerationError):
    """The generation service account is out of credit (HTTP 402)."""

    kind = "insufficient_balance"


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    if response.status_code == 429:
        raise RateLimitError("Rate limit exceeded, try again later", status_code=429)
    if response.status_code == 402:
        raise InsufficientBalanceError("Insufficient balance", status_code=402)
    raise GenerationError(
        f"Roadmap generation failed with HTTP {response.status_code}",
        status_code=response.status_code,
    )


async def generate_roadmap(
    title: str,
    language_name: str,
    *,
    client: httpx.AsyncClient | None = None,
) -> GeneratedRoadmap:
    """Ask the generation service for a detailed roadmap outline.

    Args:
        title: Roadmap title to generate sections for
        language_name: Programming language the roadmap belongs to
        client: Optional HTTP client (a short-lived one is created otherwise)

    Returns:
        The parsed sections, ready for ``import_service.merge_generated``

    Raises:
        RateLimitError: HTTP 429
        InsufficientBalanceError: HTTP 402
        GenerationError: Any other failure, including an unusable response body
    """
    settings = get_settings()
    if not settings.GENERATION_URL:
        raise GenerationError("Roadmap generation endpoint is not configured")

    headers = {"Content-Type": "application/json"}
    if settings.GENERATION_API_KEY:
        headers["Authorization"] = f"Bearer {settings.GENERATION_API_KEY}"

    logger.info("Requesting roadmap generation", title=title, language=language_name)

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=settings.GENERATION_TIMEOUT)
    try:
        response = await http.post(
            settings.GENERATION_URL,
            json={"title": title, "languageName": language_name},
            headers=headers,
        )
    except httpx.HTTPError as e:
        logger.error("Roadmap generation request failed", error=str(e))
        raise GenerationError(f"Roadmap generation request failed: {e}") from e
    finally:
        if owns_client:
            await http.aclose()

    _raise_for_status(response)

    try:
        generated = GeneratedRoadmap.model_validate(parse_json_payload(response.text))
    except ValueError as e:
        # ValidationError is a ValueError too
        logger.error("Invalid roadmap generation response", error=str(e))
        raise GenerationError("Invalid response format") from e

    logger.info("Roadmap generated", title=title, sections=len(generated.sections))
    return generated

