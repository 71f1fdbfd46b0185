"""LLM client for document drafting with OpenAI integration.

Security: Reads API key from environment only, never hardcoded.
Provides deterministic stub when no key present for testing.
"""

import json
import logging
from typing import Protocol

import openai
from openai import AsyncOpenAI

from backend.app.config import settings
from backend.app.models.common import DocType

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Server is busy. Please try again in 1 minute."
GENERATION_FAILED_MESSAGE = "We couldn't generate your draft right now. Please try again."


class GenerationError(Exception):
    """Generation failed or produced no usable text."""

    def __init__(self, message: str = GENERATION_FAILED_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class GenerationRateLimited(GenerationError):
    """Upstream model is rate limiting; the caller should retry later."""

    def __init__(self, message: str = RATE_LIMITED_MESSAGE) -> None:
        super().__init__(message)


class DocumentGenerator(Protocol):
    """Protocol for document generation implementations."""

    async def generate(self, document_type: DocType, field_values: dict[str, str]) -> str:
        """Draft a document from the user's field values.

        Args:
            document_type: Kind of document to draft
            field_values: Form field name -> user-provided value

        Returns:
            Non-empty plain text of the document

        Raises:
            GenerationRateLimited: If upstream asks us to back off
            GenerationError: On any other failure or an empty result
        """
        ...


def build_prompt(document_type: DocType, field_values: dict[str, str], max_words: int) -> str:
    """Build the drafting prompt for a document."""
    details = json.dumps(field_values, indent=2, ensure_ascii=False)
    return f"""You are an experienced Indian office professional and documentation expert.
Your task is to write a {document_type.value} that is calm, polite, and follows standard Indian formal English.

Guidelines:
- Tone: Professional, respectful, and confident.
- Style: Standard Indian business letter format.
- Audience: Indian HR managers, Bank managers, Police officers, or College Principals.
- No Filler: Do not include introductory text. Just provide the letter content.

User Details provided:
{details}

Length: Maximum {max_words} words.
Return ONLY the final document text ready for printing."""


class DeterministicStubClient:
    """Deterministic stub client for testing (no API key required)."""

    async def generate(self, document_type: DocType, field_values: dict[str, str]) -> str:
        """Render a fixed, template-shaped draft."""
        name = field_values.get("name") or "Applicant"
        lines = [f"Subject: {document_type.value}", "", "Respected Sir/Madam,", ""]
        for key, value in field_values.items():
            if key != "name" and value:
                lines.append(f"{key}: {value}")
        lines.extend(["", "Yours faithfully,", name])
        return "\n".join(lines)


class OpenAIClient:
    """OpenAI-backed document generator."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        max_words: int = 350,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
            temperature: Sampling temperature
            max_tokens: Completion token cap
            max_words: Word limit stated in the prompt
        """
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_words = max_words

    async def generate(self, document_type: DocType, field_values: dict[str, str]) -> str:
        """Generate a document using the OpenAI API."""
        prompt = build_prompt(document_type, field_values, self.max_words)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.RateLimitError as e:
            logger.warning(f"OpenAI rate limited: {e}")
            raise GenerationRateLimited() from e
        except Exception as e:
            logger.error(f"OpenAI API call failed: {e}")
            if "429" in str(e):
                raise GenerationRateLimited() from e
            raise GenerationError() from e

        text = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not text:
            logger.warning("OpenAI returned empty response")
            raise GenerationError("The AI returned an empty response. Please try again.")

        return text


def get_llm_client() -> DocumentGenerator:
    """Factory function to get appropriate generator based on config.

    Returns:
        OpenAIClient if API key is configured, DeterministicStubClient otherwise
    """
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI client for document generation")
        return OpenAIClient(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
            max_words=settings.generation_max_words,
        )

    logger.warning("No OpenAI API key configured, using deterministic stub client")
    return DeterministicStubClient()
