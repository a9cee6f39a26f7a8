"""
HireBridge - Question Selector.

Chooses the next bank question for a session. Difficulty targeting always
wins; repetition avoidance is a soft preference that is dropped, one rule at a
time, whenever it would leave nothing to ask.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Collection, Mapping, Sequence

from hirebridge.app.difficulty import next_difficulty
from hirebridge.core.domain.models import Question, Role
from hirebridge.core.question_bank import QUESTION_BANK, get_questions


logger = logging.getLogger(__name__)


class QuestionSelector:
    """
    Adaptive question picker over the static bank.

    Usage:
        selector = QuestionSelector()
        question = selector.select_next(
            Role.DATA_ANALYST,
            last_score=6,
            last_topic="sql",
            asked_topics={"sql"},
            asked_questions={"Write a SQL query ..."},
        )
    """

    def __init__(
        self,
        bank: Mapping[Role, Sequence[Question]] | None = None,
        rng: random.Random | None = None,
    ):
        self._bank = bank if bank is not None else QUESTION_BANK
        self._rng = rng or random.Random()

    def select_next(
        self,
        role: Role | str,
        last_score: int | None = None,
        last_topic: str | None = None,
        asked_topics: Collection[str] = (),
        asked_questions: Collection[str] = (),
    ) -> Question:
        """
        Pick the next question.

        Raises:
            UnsupportedRoleError: role is not recognized
            EmptyBankError: the role has no questions
        """
        questions = get_questions(role, self._bank)
        target = next_difficulty(last_score)

        candidates = [q for q in questions if q.difficulty == target]
        if not candidates:
            logger.warning(f"No {target.value} questions for {role}; using full bank")
            candidates = list(questions)

        preferences: list[Callable[[Question], bool]] = []
        if last_topic:
            preferences.append(lambda q: q.topic != last_topic)
        preferences.append(lambda q: q.topic not in asked_topics)
        preferences.append(lambda q: q.text not in asked_questions)

        for keep in preferences:
            preferred = [q for q in candidates if keep(q)]
            if preferred:
                candidates = preferred

        choice = self._rng.choice(candidates)
        logger.debug(
            f"Selected {choice.difficulty.value}/{choice.topic} "
            f"from {len(candidates)} candidate(s)"
        )
        return choice
