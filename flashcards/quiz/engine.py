"""Quiz scoring state machine.

A quiz moves ``not_started -> in_progress -> summarized``. From
``summarized`` it can be restarted, and ``exit`` returns it to
``not_started`` from anywhere. The engine is a plain in-memory object; the
quiz routes rebuild one per request from the persisted answer log with
:meth:`QuizEngine.resume`.
"""

import enum
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass

from flashcards.core.errors import EmptyDeckError, QuizStateError, ValidationError
from flashcards.models.card import AnswerOption


class QuizState(str, enum.Enum):
    not_started = "not_started"
    in_progress = "in_progress"
    summarized = "summarized"


@dataclass(frozen=True)
class QuizQuestion:
    id: int
    correct_answer: AnswerOption
    explanation: str | None = None

    @classmethod
    def from_card(cls, card) -> "QuizQuestion":
        return cls(
            id=card.id,
            correct_answer=AnswerOption(card.correct_answer),
            explanation=card.explanation,
        )


@dataclass(frozen=True)
class AnswerRecord:
    question_id: int
    selected_answer: AnswerOption
    is_correct: bool
    correct_answer: AnswerOption
    explanation: str | None

    def to_dict(self) -> dict:
        record = asdict(self)
        record["selected_answer"] = self.selected_answer.value
        record["correct_answer"] = self.correct_answer.value
        return record


@dataclass(frozen=True)
class QuizSummary:
    score: int
    total_questions: int
    answers: list[AnswerRecord]


def parse_answer(selected) -> AnswerOption:
    """Accept only the exact lowercase option keys."""
    try:
        return AnswerOption(selected)
    except ValueError as exc:
        raise ValidationError("Answer must be one of a, b, c, d.") from exc


class QuizEngine:
    def __init__(self):
        self.state = QuizState.not_started
        self.questions: list[QuizQuestion] = []
        self.question_index = 0
        self.answers: list[AnswerRecord] = []

    @classmethod
    def resume(cls, questions: Sequence[QuizQuestion], selections: Iterable[tuple[int, str]]) -> "QuizEngine":
        """Rebuild an engine by replaying ``(question_id, selected_answer)`` pairs."""
        engine = cls()
        engine.start(questions)
        for question_id, selected in selections:
            current = engine.current_question
            if current is None or current.id != question_id:
                raise QuizStateError("The deck changed since this quiz started.")
            engine.submit_answer(selected)
        return engine

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> QuizQuestion | None:
        if self.state is not QuizState.in_progress:
            return None
        return self.questions[self.question_index]

    @property
    def score(self) -> int:
        return sum(1 for answer in self.answers if answer.is_correct)

    @property
    def answered(self) -> int:
        return len(self.answers)

    def start(self, questions: Sequence[QuizQuestion]) -> None:
        if not questions:
            raise EmptyDeckError()
        self.questions = list(questions)
        self.question_index = 0
        self.answers = []
        self.state = QuizState.in_progress

    def submit_answer(self, selected) -> AnswerRecord:
        if self.state is not QuizState.in_progress:
            raise QuizStateError("No question is waiting for an answer.")
        option = parse_answer(selected)

        question = self.questions[self.question_index]
        record = AnswerRecord(
            question_id=question.id,
            selected_answer=option,
            is_correct=option == question.correct_answer,
            correct_answer=question.correct_answer,
            explanation=question.explanation,
        )
        self.answers.append(record)

        if self.question_index == len(self.questions) - 1:
            self.state = QuizState.summarized
        else:
            self.question_index += 1
        return record

    def restart(self) -> None:
        if self.state is not QuizState.summarized:
            raise QuizStateError("Only a finished quiz can be restarted.")
        self.answers = []
        self.question_index = 0
        self.state = QuizState.in_progress

    def exit(self) -> None:
        self.questions = []
        self.answers = []
        self.question_index = 0
        self.state = QuizState.not_started

    def progress(self) -> tuple[int, int]:
        """Correct answers over answers given so far."""
        return self.score, self.answered

    def summary(self) -> QuizSummary:
        if self.state is not QuizState.summarized:
            raise QuizStateError("The quiz has not been finished yet.")
        return QuizSummary(
            score=self.score,
            total_questions=self.total_questions,
            answers=list(self.answers),
        )
