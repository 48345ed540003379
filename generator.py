import random
import re
from typing import Callable, Dict, List, Optional, Tuple

from schema import (
    PLACEHOLDER_PROMPT,
    Difficulty,
    Operation,
    Question,
    QuizConfig,
    Score,
    word_problem_kind,
)

# randint(lo, hi) with inclusive bounds, same contract as random.randint
Sampler = Callable[[int, int], int]

Range = Tuple[int, int]

# -----------------
# Range tables
# -----------------
ADD_SUB_RANGES: Dict[Difficulty, Range] = {
    Difficulty.EASY: (0, 9),  # single-digit
    Difficulty.MODERATE: (10, 99),  # two-digit
    Difficulty.ADVANCED: (100, 999),  # three-digit
}

MUL_RANGES: Dict[Difficulty, Range] = {
    Difficulty.EASY: (0, 5),
    Difficulty.MODERATE: (2, 12),
    Difficulty.ADVANCED: (5, 20),
}

# (min quotient, max quotient); divisor is drawn from [1, max quotient]
DIV_RANGES: Dict[Difficulty, Range] = {
    Difficulty.EASY: (1, 9),
    Difficulty.MODERATE: (2, 12),
    Difficulty.ADVANCED: (5, 20),
}

MAX_NUMBER: Dict[Difficulty, int] = {
    Difficulty.EASY: 9,
    Difficulty.MODERATE: 99,
    Difficulty.ADVANCED: 999,
}

KIND_LABELS: Dict[Operation, str] = {
    Operation.ADD: "Addition",
    Operation.SUB: "Subtraction",
    Operation.MUL: "Multiplication",
    Operation.DIV: "Division",
}

FALLBACK_NAME = "Kiki"

INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def sampler_for(cfg: QuizConfig, randint: Optional[Sampler] = None) -> Sampler:
    if randint is not None:
        return randint
    if cfg.seed is not None:
        return random.Random(cfg.seed).randint
    return random.randint


def operand_range(difficulty: Difficulty, op: Operation) -> Range:
    if op in (Operation.ADD, Operation.SUB):
        return ADD_SUB_RANGES[difficulty]
    if op == Operation.MUL:
        return MUL_RANGES[difficulty]
    return DIV_RANGES[difficulty]


# -----------------
# Basic arithmetic
# -----------------
def generate_basic(
    difficulty: Difficulty, op: Operation, randint: Sampler = random.randint
) -> Tuple[str, int, str]:
    """Return (prompt, answer, kind label) for one arithmetic question."""
    lo, hi = operand_range(difficulty, op)
    kind = KIND_LABELS[op]

    if op == Operation.ADD:
        a = randint(lo, hi)
        b = randint(lo, hi)
        return f"{a} + {b} = ?", a + b, kind

    if op == Operation.SUB:
        a = randint(lo, hi)
        b = randint(0, a)  # never negative
        return f"{a} − {b} = ?", a - b, kind

    if op == Operation.MUL:
        a = randint(lo, hi)
        b = randint(lo, hi)
        return f"{a} × {b} = ?", a * b, kind

    divisor = randint(1, hi)
    quotient = randint(lo, hi)
    dividend = divisor * quotient
    return f"{dividend} ÷ {divisor} = ?", quotient, kind


def generate_fallback_word_problem(
    difficulty: Difficulty, randint: Sampler = random.randint
) -> Tuple[str, int, str]:
    a = randint(3, 15)
    b = randint(2, 10)
    prompt = (
        f"{FALLBACK_NAME} has {a} stickers. She gets {b} more from a friend. "
        f"How many stickers does {FALLBACK_NAME} have now?"
    )
    return prompt, a + b, word_problem_kind(difficulty)


# -----------------
# Quiz assembly
# -----------------
def make_placeholder(difficulty: Difficulty) -> Question:
    return Question(
        prompt=PLACEHOLDER_PROMPT,
        kind=word_problem_kind(difficulty),
        answer=0,
        pending=True,
    )


def build_questions(cfg: QuizConfig, randint: Optional[Sampler] = None) -> List[Question]:
    """Build a full quiz; word-problem slots are left as placeholders.

    Each slot becomes a placeholder with probability 1/4 when word problems
    are on. If none came up, slot 0 is converted so at least one word
    problem is always asked.
    """
    randint = sampler_for(cfg, randint)
    ops = cfg.effective_operations()

    questions: List[Question] = []
    placeholders = 0
    for _ in range(cfg.question_count):
        make_word = cfg.include_word_problems and randint(0, 3) == 0
        if make_word or not ops:
            # word problems on with no operations: every slot is a word slot
            questions.append(make_placeholder(cfg.difficulty))
            placeholders += 1
            continue
        op = ops[randint(0, len(ops) - 1)]
        prompt, answer, kind = generate_basic(cfg.difficulty, op, randint)
        questions.append(Question(prompt=prompt, kind=kind, answer=answer))

    if cfg.include_word_problems and placeholders == 0 and questions:
        questions[0] = make_placeholder(cfg.difficulty)

    return questions


def placeholder_indices(questions: List[Question]) -> List[int]:
    return [i for i, q in enumerate(questions) if q.is_word_problem]


# -----------------
# Grading
# -----------------
def parse_answer(text: str) -> Optional[int]:
    text = text.strip()
    if not INTEGER_RE.fullmatch(text):
        return None
    return int(text)


def grade_question(q: Question) -> bool:
    if q.pending:
        return False
    value = parse_answer(q.user_answer)
    return value is not None and value == q.answer


def grade_questions(questions: List[Question]) -> Tuple[List[Question], Score]:
    graded = [q.model_copy() for q in questions]
    correct = 0
    for q in graded:
        q.is_correct = grade_question(q)
        if q.is_correct:
            correct += 1
    return graded, Score(correct=correct, total=len(graded))


def reset_questions(questions: List[Question]) -> Tuple[List[Question], Score]:
    cleared = [q.model_copy(update={"user_answer": "", "is_correct": None}) for q in questions]
    return cleared, Score(correct=0, total=len(cleared))


def apply_answer(questions: List[Question], index: int, text: str) -> List[Question]:
    updated = [q.model_copy() for q in questions]
    updated[index] = updated[index].model_copy(update={"user_answer": text, "is_correct": None})
    return updated
