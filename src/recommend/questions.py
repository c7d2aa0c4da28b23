"""Static quiz question table.

Each question maps to one interest category, a taxonomy search keyword and
a weight. The description is the phrase used when describing the user's
interests to the AI services.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class QuestionMapping:
    """Interest mapping for a single quiz question."""

    question_id: int
    category: str
    keyword: str
    weight: int
    description: str


_QUESTIONS: tuple[QuestionMapping, ...] = (
    QuestionMapping(1, "technology", "software developer", 3, "enjoys solving problems using computers and coding"),
    QuestionMapping(2, "creative", "graphic designer", 3, "likes creating visual designs and artwork"),
    QuestionMapping(3, "social", "social worker", 3, "enjoys helping people and working in teams"),
    QuestionMapping(4, "analytical", "data analyst", 3, "fascinated by data, numbers and patterns"),
    QuestionMapping(5, "healthcare", "physician doctor", 3, "interested in medicine and helping sick people"),
    QuestionMapping(6, "business", "entrepreneur business", 3, "dreams of starting their own business"),
    QuestionMapping(7, "research", "research scientist", 3, "enjoys conducting experiments and research"),
    QuestionMapping(8, "legal", "lawyer legal", 3, "interested in laws, justice and rights"),
    QuestionMapping(9, "media", "video editor media", 3, "enjoys creating videos, films or media content"),
    QuestionMapping(10, "sports", "sports coach fitness", 2, "passionate about fitness and sports"),
    QuestionMapping(11, "technology", "artificial intelligence", 3, "excited by Artificial Intelligence and Machine Learning"),
    QuestionMapping(12, "finance", "financial analyst", 3, "likes analyzing markets and financial trends"),
    QuestionMapping(13, "engineering", "mechanical engineer", 3, "likes building things like machines or structures"),
    QuestionMapping(14, "environment", "environmental scientist", 2, "cares deeply about protecting the environment"),
    QuestionMapping(15, "aviation", "pilot aviation", 2, "dreams of flying planes or working in aviation"),
    QuestionMapping(16, "education", "teacher education", 3, "enjoys teaching and helping others learn"),
    QuestionMapping(17, "media", "journalist presenter", 2, "enjoys performing or presenting in front of people"),
    QuestionMapping(18, "creative", "fashion designer", 2, "passionate about fashion and style"),
    QuestionMapping(19, "hospitality", "chef cook", 2, "loves cooking and creating new dishes"),
    QuestionMapping(20, "psychology", "psychologist counselor", 3, "curious about how people think and behave"),
    QuestionMapping(21, "technology", "cybersecurity analyst", 3, "interested in cybersecurity and protecting systems"),
    QuestionMapping(22, "business", "marketing manager", 3, "enjoys marketing products and creating campaigns"),
    QuestionMapping(23, "governance", "civil service administrator", 2, "wants to serve the country through government service"),
    QuestionMapping(24, "design", "architect interior design", 3, "enjoys designing buildings and interior spaces"),
    QuestionMapping(25, "creative", "artist creative", 2, "artistic and enjoys creative expression"),
    QuestionMapping(26, "healthcare", "pharmacist", 3, "interested in medicines and pharmacy"),
    QuestionMapping(27, "technology", "cloud computing engineer", 3, "enjoys working with cloud computing and networks"),
    QuestionMapping(28, "media", "journalist writer", 3, "likes writing articles and reporting news"),
    QuestionMapping(29, "hospitality", "event planner", 2, "enjoys planning and organizing events"),
    QuestionMapping(30, "hospitality", "customer service", 2, "enjoys customer service and hospitality work"),
)

QUESTION_TABLE: MappingProxyType[int, QuestionMapping] = MappingProxyType(
    {question.question_id: question for question in _QUESTIONS}
)


def build_question_table(
    questions: list[QuestionMapping] | tuple[QuestionMapping, ...],
) -> MappingProxyType[int, QuestionMapping]:
    """Build a read-only question table keyed by question id."""
    table: dict[int, QuestionMapping] = {}
    for question in questions:
        if question.question_id in table:
            raise ValueError(f"Duplicate question id: {question.question_id}")
        table[question.question_id] = question
    return MappingProxyType(table)
