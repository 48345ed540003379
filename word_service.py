import logging
import math
import random
from typing import Dict, List, Tuple

from fastapi import APIRouter, HTTPException, Request
from openai import AsyncOpenAI, OpenAIError

import settings
from generator import Sampler
from prompts import SYSTEM_PROMPT, build_prompt
from schema import Difficulty, Operation, WordProblemResponse

logger = logging.getLogger(__name__)

router = APIRouter()

FALLBACK_NOTE = "AI unavailable; returned local fallback."
EMPTY_STORY = "A student-friendly word problem could not be generated."

# operation pool tilts with difficulty
SERVICE_OPERATIONS: Dict[Difficulty, List[Operation]] = {
    Difficulty.EASY: [Operation.ADD, Operation.SUB],
    Difficulty.MODERATE: [Operation.ADD, Operation.SUB, Operation.MUL],
    Difficulty.ADVANCED: [Operation.ADD, Operation.SUB, Operation.MUL, Operation.DIV],
}

# keep things friendly to 2nd/3rd grade ranges
NUMBER_CAPS: Dict[Difficulty, int] = {
    Difficulty.EASY: 20,
    Difficulty.MODERATE: 50,
    Difficulty.ADVANCED: 99,
}

TABLE_LIMITS: Dict[Difficulty, int] = {
    Difficulty.EASY: 5,
    Difficulty.MODERATE: 10,
    Difficulty.ADVANCED: 12,
}

MIN_MAX_NUMBER, MAX_MAX_NUMBER, DEFAULT_MAX_NUMBER = 10, 200, 20


class PhrasingUnavailable(Exception):
    pass


def clamp_max_number(raw) -> int:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        value = DEFAULT_MAX_NUMBER
    if not math.isfinite(value):
        value = DEFAULT_MAX_NUMBER
    return int(min(max(value, MIN_MAX_NUMBER), MAX_MAX_NUMBER))


def pick_operation(difficulty: Difficulty, randint: Sampler = random.randint) -> Operation:
    pool = SERVICE_OPERATIONS[difficulty]
    return pool[randint(0, len(pool) - 1)]


def build_operands(
    op: Operation, difficulty: Difficulty, max_number: int, randint: Sampler = random.randint
) -> Tuple[int, int, int]:
    """Return (a, b, answer); the answer is always computed here, never by the model."""
    cap = min(max_number, NUMBER_CAPS[difficulty])
    hi = TABLE_LIMITS[difficulty]

    if op == Operation.ADD:
        a = randint(0, cap)
        b = randint(0, cap - a if cap - a > 0 else cap)
        return a, b, a + b
    if op == Operation.SUB:
        a = randint(0, cap)
        b = randint(0, a)
        return a, b, a - b
    if op == Operation.MUL:
        a = randint(0, hi)
        b = randint(0, hi)
        return a, b, a * b
    divisor = randint(1, hi)
    quotient = randint(1, hi)
    return divisor * quotient, divisor, quotient


async def phrase_word_problem(op: Operation, a: int, b: int, difficulty: Difficulty) -> str:
    api_key = settings.openai_api_key()
    if not api_key:
        raise PhrasingUnavailable("OPENAI_API_KEY is not set")

    client = AsyncOpenAI(api_key=api_key)
    resp = await client.chat.completions.create(
        model=settings.openai_model(),
        temperature=0.4,
        max_tokens=80,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(op, a, b, difficulty)},
        ],
    )
    content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
    return content or EMPTY_STORY


def fallback_problem(randint: Sampler = random.randint) -> WordProblemResponse:
    a, b, answer = build_operands(Operation.ADD, Difficulty.EASY, DEFAULT_MAX_NUMBER, randint)
    return WordProblemResponse(
        prompt=f"Kiki has {a} stickers and gets {b} more. How many stickers does she have now?",
        answer=answer,
        note=FALLBACK_NOTE,
    )


@router.post("/api/word-problem", response_model=WordProblemResponse, response_model_exclude_none=True)
async def api_word_problem(request: Request) -> WordProblemResponse:
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(400, "Invalid JSON.")
    if not isinstance(body, dict):
        body = {}

    raw = body.get("difficulty")
    try:
        difficulty = Difficulty(str(raw if raw is not None else "easy").lower())
    except ValueError:
        raise HTTPException(400, "difficulty must be 'easy' | 'moderate' | 'advanced'.")
    max_number = clamp_max_number(body.get("max_number", DEFAULT_MAX_NUMBER))

    # operands and answer are chosen here; the model only phrases the story
    op = pick_operation(difficulty)
    a, b, answer = build_operands(op, difficulty, max_number)
    try:
        prompt = await phrase_word_problem(op, a, b, difficulty)
    except (OpenAIError, PhrasingUnavailable) as e:
        logger.warning("phrasing failed, serving local fallback: %s", e)
        return fallback_problem()

    return WordProblemResponse(prompt=prompt, answer=answer)
