"""
Admission test scoring.

Four fixed questions: three single-choice and one multi-choice.  A
single-choice question scores 1 when the answer matches the correct option.
A multi-choice question scores

    max(0, (correct_selected - incorrect_selected) / len(correct_options))

so every wrong selection cancels one right one.  The final score is the
mean over all questions scaled to 0-100 and rounded half up.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Mapping, Tuple

PASS_THRESHOLD = 70


class QuestionKind(str, Enum):
    SINGLE = 'single'
    MULTI = 'multi'


@dataclass(frozen=True)
class Question:
    id: str
    kind: QuestionKind
    prompt: str
    options: Tuple[str, ...]
    correct: frozenset

    def __post_init__(self):
        if not self.correct or not self.correct <= set(self.options):
            raise ValueError(f"Question {self.id}: correct options must be a non-empty subset of options")
        if self.kind == QuestionKind.SINGLE and len(self.correct) != 1:
            raise ValueError(f"Question {self.id}: single-choice needs exactly one correct option")

    @property
    def correct_option(self) -> str:
        return next(iter(self.correct))


_APPRECIATE_REVIEWS = 'Appreciate positive reviews and use negative ones to improve future projects'

ADMISSION_QUESTIONS: Tuple[Question, ...] = (
    Question(
        id='reviews_handling',
        kind=QuestionKind.SINGLE,
        prompt='How do you handle client reviews?',
        options=(
            'Ignore negative reviews',
            "Respond defensively to negative reviews and point out the client's mistake",
            'Contact support and ask for negative reviews to be deleted',
            _APPRECIATE_REVIEWS,
        ),
        correct=frozenset({_APPRECIATE_REVIEWS}),
    ),
    Question(
        id='client_relationships',
        kind=QuestionKind.SINGLE,
        prompt='How do you build successful, long-term relationships with your clients?',
        options=(
            'Finish projects as fast as possible even at the expense of quality',
            'Communicate regularly, listen to their needs and deliver polished work',
            'Ignore client feedback and decide based only on your own preferences',
            _APPRECIATE_REVIEWS,
        ),
        correct=frozenset({'Communicate regularly, listen to their needs and deliver polished work'}),
    ),
    Question(
        id='project_priority',
        kind=QuestionKind.SINGLE,
        prompt='Which of the following should you prioritise when applying to a project?',
        options=(
            'Submit a generic proposal without tailoring it',
            'List all of your skills even if they are unrelated to the project',
            'Show a clear understanding of what the client needs',
            'Quote a low budget to improve your chances of being chosen',
        ),
        correct=frozenset({'Show a clear understanding of what the client needs'}),
    ),
    Question(
        id='negative_reviews_causes',
        kind=QuestionKind.MULTI,
        prompt='What leads to negative reviews?',
        options=(
            'Applying for projects you have not mastered',
            'Listening to client feedback and being open to revisions',
            'An unclear agreement with the client that changes after work starts',
            'Delivering the project late',
        ),
        correct=frozenset({
            'Applying for projects you have not mastered',
            'An unclear agreement with the client that changes after work starts',
            'Delivering the project late',
        }),
    ),
)

QUESTIONS_BY_ID: Dict[str, Question] = {q.id: q for q in ADMISSION_QUESTIONS}


def _as_selection(answer) -> frozenset:
    if answer is None:
        return frozenset()
    if isinstance(answer, str):
        return frozenset({answer}) if answer else frozenset()
    return frozenset(answer)


def question_score(question: Question, answer) -> float:
    """Score a single answer in [0, 1]."""
    if question.kind == QuestionKind.SINGLE:
        return 1.0 if isinstance(answer, str) and answer == question.correct_option else 0.0

    selected = _as_selection(answer)
    correct_count = len(selected & question.correct)
    incorrect_count = len(selected - question.correct)
    raw = (correct_count - incorrect_count) / len(question.correct)
    return min(1.0, max(0.0, raw))


def score_answers(
    answers: Mapping[str, object],
    questions: Iterable[Question] = ADMISSION_QUESTIONS,
) -> int:
    """Overall admission score, 0-100."""
    questions = tuple(questions)
    if not questions:
        return 0
    total = sum(question_score(q, answers.get(q.id)) for q in questions)
    # Half-up rounding; round() would send 62.5 to 62.
    return int(math.floor(100 * total / len(questions) + 0.5))


def is_answered(question: Question, answer) -> bool:
    if question.kind == QuestionKind.SINGLE:
        return isinstance(answer, str) and answer != ''
    return len(_as_selection(answer)) > 0


def answers_complete(
    answers: Mapping[str, object],
    questions: Iterable[Question] = ADMISSION_QUESTIONS,
) -> bool:
    """True when every question has a non-empty answer."""
    return all(is_answered(q, answers.get(q.id)) for q in questions)


def passed(score: int) -> bool:
    return score >= PASS_THRESHOLD


def verdict(score: int) -> str:
    """Advisory label shown next to the score.  Does not block submission."""
    return 'Passed' if passed(score) else 'Needs Review'
