"""Quiz answer to interest signal extraction."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from src.recommend.models import AnswerSignal, InterestSignal, QuizAnswers
from src.recommend.questions import QUESTION_TABLE, QuestionMapping

logger = logging.getLogger(__name__)


class InterestExtractor:
    """Convert quiz answers into weighted category signals."""

    def __init__(self, questions: Mapping[int, QuestionMapping] | None = None) -> None:
        self.questions = questions if questions is not None else QUESTION_TABLE

    def extract(self, answers: QuizAnswers) -> list[InterestSignal]:
        """Accumulate agreed answers per category, heaviest category first.

        A category's keyword is taken from its lowest-numbered agreed
        question. Categories with equal weight keep first-seen order.
        """
        weights: dict[str, int] = {}
        keywords: dict[str, str] = {}

        for question_id in sorted(answers):
            if answers[question_id] != AnswerSignal.AGREE:
                continue
            mapping = self.questions.get(question_id)
            if mapping is None:
                logger.debug("Ignoring answer to unknown question %s", question_id)
                continue
            weights[mapping.category] = weights.get(mapping.category, 0) + mapping.weight
            keywords.setdefault(mapping.category, mapping.keyword)

        signals = [
            InterestSignal(category=category, keyword=keywords[category], weight=weight)
            for category, weight in weights.items()
        ]
        signals.sort(key=lambda signal: signal.weight, reverse=True)
        return signals

    def describe(self, answers: QuizAnswers) -> list[str]:
        """Return the natural-language descriptions of agreed questions."""
        descriptions: list[str] = []
        for question_id in sorted(answers):
            if answers[question_id] != AnswerSignal.AGREE:
                continue
            mapping = self.questions.get(question_id)
            if mapping is not None:
                descriptions.append(mapping.description)
        return descriptions
