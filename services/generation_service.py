"""
Generation service for the Metaphor backend: prompt -> model -> SVG -> title
"""
import json
import logging
import re
import time
from typing import Callable, FrozenSet, List, Optional

from models.generation import GenerationRequest, GenerationResult, MetaphorTitles
from prompts.metaphor_prompts import (
    TITLE_SYSTEM_PROMPT,
    build_system_prompt,
    build_title_user_prompt,
    build_user_prompt,
)
from services.exceptions import NoContent, NoGraphicsFound, UpstreamUnavailable
from services.model_client import (
    ContentMissing,
    InvocationOutcome,
    ModelClient,
    ModelReply,
    TransportFailure,
)

logger = logging.getLogger(__name__)

SVG_PATTERN = re.compile(r"<svg(?:\s[^>]*)?>[\s\S]*?</svg>")
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
QUOTE_CHARS = "\"'`«»“”„"
DEFAULT_TITLE = "Metaphor"

IMAGE_MAX_TOKENS = 4096
IMAGE_TEMPERATURE = 0.7
TITLE_MAX_TOKENS = 200
TITLE_TEMPERATURE = 0.3


def extract_svg(text: str) -> Optional[str]:
    """Return the first <svg ...>...</svg> span in the model output, verbatim."""
    match = SVG_PATTERN.search(text)
    return match.group(0) if match else None


def _title_words(text: str) -> List[str]:
    words = (word.strip(QUOTE_CHARS) for word in text.strip().split())
    return [word for word in words if word]


def normalize_title(title: str, fallback: str) -> str:
    """Cut a model supplied title to its first two words, unquoted."""
    words = _title_words(title)
    if not words:
        return fallback
    return " ".join(words[:2])


def derive_title_from_text(text: str) -> str:
    """Title of last resort: the first two words of the concept."""
    return normalize_title(text, DEFAULT_TITLE)


class GenerationService:
    def __init__(
        self,
        model_client: ModelClient,
        default_model: str,
        fallback_model: str,
        fallback_skip_statuses: FrozenSet[int] = frozenset(),
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.model_client = model_client
        self.default_model = default_model
        self.fallback_model = fallback_model
        self.fallback_skip_statuses = fallback_skip_statuses
        self.clock = clock

    def candidate_models(self, requested_model: Optional[str]) -> List[str]:
        """Requested model first, then the fallback unless it is the same model."""
        primary = requested_model or self.default_model
        if primary == self.fallback_model:
            return [primary]
        return [primary, self.fallback_model]

    async def invoke_with_fallback(
        self,
        candidates: List[str],
        system_prompt: str,
        user_prompt: str,
        api_key: str,
        max_tokens: int,
        temperature: float,
    ) -> InvocationOutcome:
        """
        Try each candidate model in order until one does not fail at the
        transport level. Returns the first non-transport outcome or the last
        failure.
        """
        outcome: Optional[InvocationOutcome] = None
        for index, model in enumerate(candidates):
            if index > 0:
                logger.info(f"Trying fallback model: {model}")
            outcome = await self.model_client.invoke(
                model, system_prompt, user_prompt, api_key, max_tokens, temperature
            )
            if not isinstance(outcome, TransportFailure):
                return outcome
            if outcome.status_code in self.fallback_skip_statuses:
                logger.warning(f"Status {outcome.status_code} from {model} is not eligible for fallback")
                return outcome
        if outcome is None:
            raise ValueError("At least one candidate model is required")
        return outcome

    async def generate(self, request: GenerationRequest, api_key: str) -> GenerationResult:
        """
        Generate one metaphor SVG with a best-effort title.

        Raises:
            UpstreamUnavailable: every candidate model failed at the transport level
            NoContent: the model answered without any message text
            NoGraphicsFound: the answer contained no <svg> element
        """
        style = request.style.value
        complexity = request.complexity.value
        animation = request.animation.value
        system_prompt = build_system_prompt(style, complexity, animation)
        user_prompt = build_user_prompt(request.text, complexity, animation)
        candidates = self.candidate_models(request.model)

        logger.info(f"Generating ({style}/{complexity}/{animation}) with {candidates[0]} for: \"{request.text[:50]}...\"")
        start_time = self.clock()

        outcome = await self.invoke_with_fallback(
            candidates, system_prompt, user_prompt, api_key, IMAGE_MAX_TOKENS, IMAGE_TEMPERATURE
        )
        if isinstance(outcome, TransportFailure):
            logger.error(f"All candidate models failed, last status: {outcome.status_code}")
            raise UpstreamUnavailable()
        if isinstance(outcome, ContentMissing):
            raise NoContent()

        svg = extract_svg(outcome.text)
        if svg is None:
            logger.error(f"No SVG in response from {outcome.model}: {outcome.text[:200]}")
            raise NoGraphicsFound()

        elapsed_ms = max(0, int((self.clock() - start_time) * 1000))
        logger.info(f"Generated with {outcome.model} in {elapsed_ms}ms")

        titles = await self.generate_titles(request.text, api_key, outcome.model)
        return GenerationResult(svg=svg, model=outcome.model, elapsed_ms=elapsed_ms, titles=titles)

    async def generate_titles(self, text: str, api_key: str, model: str) -> Optional[MetaphorTitles]:
        """
        Ask the model for a short Russian and English title.

        Any failure yields None; a missing title never fails the request.
        """
        fallback = derive_title_from_text(text)
        try:
            outcome = await self.model_client.invoke(
                model,
                TITLE_SYSTEM_PROMPT,
                build_title_user_prompt(text),
                api_key,
                TITLE_MAX_TOKENS,
                TITLE_TEMPERATURE,
            )
            if not isinstance(outcome, ModelReply):
                logger.warning(f"Title generation skipped, model outcome: {type(outcome).__name__}")
                return None

            match = JSON_OBJECT_PATTERN.search(outcome.text)
            if not match:
                logger.warning("Title response contained no JSON object")
                return None

            parsed = json.loads(match.group(0))
            if not isinstance(parsed, dict):
                return None

            title = parsed.get("title")
            title_en = parsed.get("titleEn")
            return MetaphorTitles(
                title=normalize_title(title if isinstance(title, str) else "", fallback),
                title_en=normalize_title(title_en if isinstance(title_en, str) else "", fallback),
            )
        except Exception as e:
            logger.warning(f"Title generation failed: {str(e)}")
            return None
