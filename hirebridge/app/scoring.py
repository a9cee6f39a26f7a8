"""
HireBridge - Answer Scorer.

Grades one answer on a 1-10 scale through the oracle. Scoring can never stop
an interview: every failure degrades to the configured default score.
"""

from __future__ import annotations

import asyncio
import logging
import re

from hirebridge.app.difficulty import clamp_score
from hirebridge.core.config import Settings, get_settings
from hirebridge.core.domain.models import AskedQuestion, Question
from hirebridge.core.prompts import CODE_BLOCK, SCORING_PROMPT
from hirebridge.infra.llm.gemini import TextOracle


logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"-?\d+")


def parse_score(response: str) -> int:
    """Extract the first integer in an oracle response, clamped to [1, 10]."""
    match = _INTEGER.search(response or "")
    if not match:
        raise ValueError(f"No integer in response: {response[:60]!r}")
    return clamp_score(int(match.group()))


class AnswerScorer:
    """
    Oracle-backed answer grading with a fixed local fallback.

    Usage:
        scorer = AnswerScorer(oracle)
        score = await scorer.score(question, "A hash map gives O(1) lookups...")
    """

    def __init__(
        self,
        oracle: TextOracle | None = None,
        settings: Settings | None = None,
    ):
        self._oracle = oracle
        self._settings = settings or get_settings()

    @property
    def default_score(self) -> int:
        return clamp_score(self._settings.DEFAULT_ANSWER_SCORE)

    async def score(self, question: Question | AskedQuestion, answer: str) -> int:
        """Score an answer. Never raises."""
        if self._oracle is None:
            logger.warning("No oracle configured; using default score")
            return self.default_score

        prompt = self._build_prompt(question, answer)

        try:
            response = await asyncio.wait_for(
                self._oracle.complete(prompt),
                timeout=self._settings.ORACLE_TIMEOUT_SECONDS,
            )
            score = parse_score(response)
        except asyncio.TimeoutError:
            logger.warning("Scoring timed out; using default score")
            return self.default_score
        except Exception as e:
            logger.warning(f"Scoring failed, using default score: {e}")
            return self.default_score

        logger.debug(f"Oracle score: {score}")
        return score

    def _build_prompt(self, question: Question | AskedQuestion, answer: str) -> str:
        if isinstance(question, AskedQuestion):
            text, snippet = question.question, question.code_snippet
        else:
            text, snippet = question.text, question.code_snippet

        code_block = CODE_BLOCK.format(code_snippet=snippet) if snippet else ""
        return SCORING_PROMPT.format(question=text, code_block=code_block, answer=answer)
