"""Shared fixtures for the quiz tests."""

import json
from typing import Iterable, List

import httpx
import pytest

from schema import Difficulty, Question, QuizConfig
from store import QuizStore


class ScriptedSampler:
    """Deterministic randint replacement that replays a fixed list of draws."""

    def __init__(self, values: Iterable[int]):
        self.values: List[int] = list(values)
        self.calls: List[tuple] = []

    def __call__(self, lo: int, hi: int) -> int:
        self.calls.append((lo, hi))
        value = self.values.pop(0)
        assert lo <= value <= hi, f"scripted draw {value} outside [{lo}, {hi}]"
        return value


def lowest(lo: int, hi: int) -> int:
    return lo


def highest(lo: int, hi: int) -> int:
    return hi


def json_transport(payload, status_code: int = 200, seen: list = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler)


def failing_transport(seen: list = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        raise httpx.ConnectError("service unreachable", request=request)

    return httpx.MockTransport(handler)


def request_body(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.fixture
def store():
    return QuizStore()


@pytest.fixture
def easy_config():
    return QuizConfig(question_count=10, difficulty=Difficulty.EASY, include_word_problems=True)


@pytest.fixture
def five_questions():
    return [
        Question(prompt="1 + 1 = ?", kind="Addition", answer=2),
        Question(prompt="2 + 5 = ?", kind="Addition", answer=7),
        Question(prompt="9 − 4 = ?", kind="Subtraction", answer=5),
        Question(prompt="3 × 4 = ?", kind="Multiplication", answer=12),
        Question(prompt="8 ÷ 2 = ?", kind="Division", answer=4),
    ]
