"""
Self-repair loop for malformed model output.

When a response does not parse, the model is shown its own broken JSON and
asked to fix it. Each repair answer becomes the next candidate. The loop is
bounded by a maximum number of repair round trips and always ends with a
usable value: the first successful parse, or the schema's default payload.
"""

import logging
from typing import Any, Awaitable, Callable

from .errors import LLMError, ResponseParseError
from .parsing import ResponseSchema

logger = logging.getLogger(__name__)

# Sends one prompt to the model and returns its raw text
Generate = Callable[[str], Awaitable[str]]


class SelfRepairLoop:
    """
    Bounded parse / repair state machine for one response schema.

    Args:
        schema: response shape being repaired
        generate: coroutine function performing one model round trip
        max_attempts: maximum number of repair round trips (0 = parse once)
    """

    def __init__(self, schema: ResponseSchema, generate: Generate, max_attempts: int = 5):
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        self.schema = schema
        self.generate = generate
        self.max_attempts = max_attempts

    async def run(self, candidate: str) -> Any:
        """Parse `candidate`, repairing it through the model as needed."""
        attempt = 0
        while True:
            try:
                return self.schema.parse(candidate)
            except ResponseParseError as e:
                logger.debug(f"{self.schema.name} parse failed (attempt {attempt}): {e}")

            if attempt >= self.max_attempts:
                break
            attempt += 1

            repaired = await self._request_repair(candidate, attempt)
            if repaired is None:
                break
            candidate = repaired

        logger.error(
            f"Could not obtain valid {self.schema.name} JSON after {attempt} repair attempt(s), using defaults"
        )
        return self.schema.default()

    async def _request_repair(self, candidate: str, attempt: int) -> str | None:
        """
        One repair round trip.

        Returns the next candidate, the unchanged candidate if the call itself
        failed, or None if the answer holds no JSON at all.
        """
        logger.info(f"Attempting {self.schema.name} JSON correction with LLM (attempt {attempt}/{self.max_attempts})")
        try:
            response = await self.generate(self.schema.repair_prompt(candidate))
        except LLMError as e:
            logger.warning(f"LLM {self.schema.name} correction attempt {attempt} failed: {e}")
            return candidate

        span = self.schema.find_span(response)
        if span is None:
            logger.warning(f"LLM {self.schema.name} correction attempt {attempt} returned no JSON, giving up")
            return None

        logger.debug(f"LLM corrected {self.schema.name} JSON (attempt {attempt}): {span}")
        return span
