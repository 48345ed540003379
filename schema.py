from enum import Enum
from typing import List, Optional, Set, Tuple

from pydantic import BaseModel, Field, StrictInt, StrictStr, field_validator

DEFAULT_QUESTION_COUNT = 10
MIN_QUESTIONS = 5
MAX_QUESTIONS = 20

WORD_PROBLEM_TAG = "Word Problem"
PLACEHOLDER_PROMPT = "Loading AI word problem..."


class Difficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    ADVANCED = "advanced"

    @property
    def code(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Operation(str, Enum):
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"


def word_problem_kind(difficulty: Difficulty) -> str:
    # UI tag matching relies on WORD_PROBLEM_TAG staying in the label
    return f"{WORD_PROBLEM_TAG} 🌟 ({difficulty.label})"


class QuizConfig(BaseModel):
    question_count: int = DEFAULT_QUESTION_COUNT
    difficulty: Difficulty = Difficulty.EASY
    enabled_operations: Set[Operation] = Field(
        default_factory=lambda: {Operation.ADD, Operation.SUB}
    )
    include_word_problems: bool = True
    seed: Optional[int] = None

    @field_validator("question_count", mode="before")
    @classmethod
    def _clamp_count(cls, v):
        try:
            n = int(v)
        except (TypeError, ValueError):
            return DEFAULT_QUESTION_COUNT
        return max(MIN_QUESTIONS, min(MAX_QUESTIONS, n))

    def effective_operations(self) -> List[Operation]:
        """Operations to draw from, in a stable order.

        Nothing enabled and no word problems would leave nothing to ask,
        so addition is forced on for that case only. The stored config is
        left untouched.
        """
        ops = [op for op in Operation if op in self.enabled_operations]
        if not ops and not self.include_word_problems:
            ops.append(Operation.ADD)
        return ops


class Question(BaseModel):
    prompt: str
    kind: str
    answer: int = 0
    user_answer: str = ""
    is_correct: Optional[bool] = None
    pending: bool = False  # placeholder still waiting for enrichment

    @property
    def is_word_problem(self) -> bool:
        return WORD_PROBLEM_TAG in self.kind


class Score(BaseModel):
    correct: int = 0
    total: int = 0

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return round(self.correct / self.total * 100)

    @property
    def message(self) -> str:
        if self.total == 0:
            return ""
        if self.correct == self.total:
            return "Perfect score! 🏆"
        if self.correct * 2 >= self.total:
            return "Nice work! Look over the ones marked in red and try again. 💪"
        return "Great practice round. Try a new quiz or pick an easier level and build up! 🌱"

    def as_tuple(self) -> Tuple[int, int]:
        return self.correct, self.total


# -----------------
# Word-problem service wire format
# -----------------
class WordProblemRequest(BaseModel):
    difficulty: str
    max_number: int


class WordProblemResponse(BaseModel):
    prompt: StrictStr
    answer: StrictInt
    note: Optional[str] = None


# -----------------
# API payloads
# -----------------
class AnswerUpdate(BaseModel):
    user_answer: str = ""


class ScoreView(BaseModel):
    correct: int
    total: int
    percent: int
    message: str


class QuizSnapshot(BaseModel):
    config: QuizConfig
    questions: List[Question]
    score: ScoreView
    show_results: bool = False
