"""
LLM analysis client.

Builds the analysis and suggestion prompts, sends them through the Ollama
transport and turns the answers into validated values with the extraction,
parsing and self-repair steps.

The two operations fail differently on purpose:
- analyze_file lets transport errors and timeouts propagate (hard failure)
- generate_suggestions retries the whole round trip with exponential
  backoff and returns an empty list if every attempt fails
"""

import asyncio
import logging
from typing import Awaitable, Callable

from ..services.ollama import OllamaClient
from ..settings import OllamaSettings
from .parsing import ANALYSIS_SCHEMA, SUGGESTIONS_SCHEMA
from .prompts import build_analysis_prompt, build_suggestions_prompt
from .rating import CleanCodeRating
from .repair import SelfRepairLoop
from .suggestions import LLMSuggestion

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


class LLMAnalysisClient:
    def __init__(
        self,
        ollama: OllamaClient,
        settings: OllamaSettings,
        sleeper: Sleeper = asyncio.sleep,
    ):
        self.ollama = ollama
        self.settings = settings
        self.sleeper = sleeper

    async def _generate_for_analysis(self, prompt: str) -> str:
        return await self.ollama.generate(prompt, self.settings.analysis_timeout_seconds)

    async def _generate_for_suggestions(self, prompt: str) -> str:
        return await self.ollama.generate(prompt, self.settings.suggestions_timeout_seconds)

    async def analyze_file(self, content: str) -> CleanCodeRating:
        """
        Score one file's content on the five clean-code criteria.

        Malformed model output is repaired or replaced by neutral defaults.

        Raises:
            LLMError: the initial model call failed (timeout, transport, protocol)
        """
        response = await self._generate_for_analysis(build_analysis_prompt(content))

        loop = SelfRepairLoop(
            ANALYSIS_SCHEMA,
            self._generate_for_analysis,
            max_attempts=self.settings.max_json_fix_retries,
        )
        return await loop.run(ANALYSIS_SCHEMA.extract(response))

    async def generate_suggestions(self, content: str, rating: CleanCodeRating) -> list[LLMSuggestion]:
        """
        Ask for improvement suggestions focused on the weakest criteria.

        Never raises: every failure is logged and retried, and an empty list
        is returned once all attempts are used up.
        """
        prompt = build_suggestions_prompt(content, rating)
        max_attempts = self.settings.suggestion_attempts

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                logger.info(f"Retrying suggestions request (attempt {attempt}/{max_attempts})")
            try:
                response = await self._generate_for_suggestions(prompt)
                loop = SelfRepairLoop(
                    SUGGESTIONS_SCHEMA,
                    self._generate_for_suggestions,
                    max_attempts=self.settings.max_json_fix_retries,
                )
                return await loop.run(SUGGESTIONS_SCHEMA.extract(response))
            except Exception as e:
                logger.warning(f"Suggestions request failed on attempt {attempt}/{max_attempts}: {e}")

            if attempt < max_attempts:
                delay = 2 ** attempt
                logger.info(f"Waiting {delay}s before retrying suggestions")
                await self.sleeper(delay)

        logger.error(f"Giving up on suggestions after {max_attempts} attempts")
        return []
