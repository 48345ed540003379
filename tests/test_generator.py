"""Unit tests for arithmetic generation, quiz assembly and grading."""

import random
import re

import pytest

from conftest import ScriptedSampler, highest, lowest
from generator import (
    ADD_SUB_RANGES,
    DIV_RANGES,
    MUL_RANGES,
    apply_answer,
    build_questions,
    generate_basic,
    generate_fallback_word_problem,
    grade_questions,
    parse_answer,
    placeholder_indices,
    reset_questions,
)
from schema import PLACEHOLDER_PROMPT, Difficulty, Operation, Question, QuizConfig, Score

BINARY_RE = re.compile(r"^(\d+) (.) (\d+) = \?$")

ALL_DIFFICULTIES = list(Difficulty)


def _operands(prompt: str):
    m = BINARY_RE.match(prompt)
    assert m, prompt
    return int(m.group(1)), m.group(2), int(m.group(3))


class TestAddition:
    @pytest.mark.parametrize("difficulty", ALL_DIFFICULTIES)
    def test_answer_is_sum_and_operands_in_range(self, difficulty):
        rng = random.Random(7)
        lo, hi = ADD_SUB_RANGES[difficulty]
        for _ in range(200):
            prompt, answer, kind = generate_basic(difficulty, Operation.ADD, rng.randint)
            a, sign, b = _operands(prompt)
            assert sign == "+"
            assert answer == a + b
            assert lo <= a <= hi and lo <= b <= hi
            assert kind == "Addition"

    def test_scripted_draws(self):
        prompt, answer, kind = generate_basic(Difficulty.EASY, Operation.ADD, ScriptedSampler([3, 4]))
        assert (prompt, answer, kind) == ("3 + 4 = ?", 7, "Addition")


class TestSubtraction:
    @pytest.mark.parametrize("difficulty", ALL_DIFFICULTIES)
    def test_result_never_negative(self, difficulty):
        rng = random.Random(11)
        for _ in range(200):
            prompt, answer, _ = generate_basic(difficulty, Operation.SUB, rng.randint)
            a, sign, b = _operands(prompt)
            assert sign == "−"
            assert b <= a
            assert answer == a - b >= 0

    def test_second_operand_drawn_from_zero_to_first(self):
        sampler = ScriptedSampler([42, 42])
        prompt, answer, _ = generate_basic(Difficulty.MODERATE, Operation.SUB, sampler)
        assert sampler.calls == [(10, 99), (0, 42)]
        assert prompt == "42 − 42 = ?"
        assert answer == 0


class TestMultiplication:
    @pytest.mark.parametrize("difficulty", ALL_DIFFICULTIES)
    def test_product_and_ranges(self, difficulty):
        rng = random.Random(3)
        lo, hi = MUL_RANGES[difficulty]
        for _ in range(200):
            prompt, answer, kind = generate_basic(difficulty, Operation.MUL, rng.randint)
            a, sign, b = _operands(prompt)
            assert sign == "×"
            assert answer == a * b
            assert lo <= a <= hi and lo <= b <= hi
            assert kind == "Multiplication"


class TestDivision:
    @pytest.mark.parametrize("difficulty", ALL_DIFFICULTIES)
    def test_whole_number_results(self, difficulty):
        rng = random.Random(5)
        min_q, max_q = DIV_RANGES[difficulty]
        for _ in range(200):
            prompt, answer, kind = generate_basic(difficulty, Operation.DIV, rng.randint)
            dividend, sign, divisor = _operands(prompt)
            assert sign == "÷"
            assert divisor >= 1
            assert divisor <= max_q
            assert min_q <= answer <= max_q
            assert answer * divisor == dividend
            assert kind == "Division"

    def test_divisor_and_quotient_bounds(self):
        sampler = ScriptedSampler([20, 5])
        prompt, answer, _ = generate_basic(Difficulty.ADVANCED, Operation.DIV, sampler)
        assert sampler.calls == [(1, 20), (5, 20)]
        assert prompt == "100 ÷ 20 = ?"
        assert answer == 5


class TestFallbackWordProblem:
    def test_sticker_template(self):
        prompt, answer, kind = generate_fallback_word_problem(Difficulty.MODERATE, ScriptedSampler([5, 6]))
        assert prompt == (
            "Kiki has 5 stickers. She gets 6 more from a friend. "
            "How many stickers does Kiki have now?"
        )
        assert answer == 11
        assert kind == "Word Problem 🌟 (Moderate)"

    def test_operand_ranges(self):
        sampler = ScriptedSampler([3, 2])
        generate_fallback_word_problem(Difficulty.EASY, sampler)
        assert sampler.calls == [(3, 15), (2, 10)]


class TestBuildQuestions:
    def test_length_matches_count(self, easy_config):
        assert len(build_questions(easy_config, random.Random(1).randint)) == 10

    def test_no_operations_and_no_words_falls_back_to_addition(self):
        cfg = QuizConfig(question_count=8, enabled_operations=set(), include_word_problems=False)
        questions = build_questions(cfg, random.Random(2).randint)
        assert len(questions) == 8
        assert all(q.kind == "Addition" for q in questions)
        # the force-enable is not written back
        assert cfg.enabled_operations == set()

    def test_minimum_one_placeholder(self):
        # highest() draws 3 for every slot, so no slot becomes a placeholder on its own
        cfg = QuizConfig(question_count=6, enabled_operations={Operation.ADD}, include_word_problems=True)
        questions = build_questions(cfg, highest)
        assert placeholder_indices(questions) == [0]
        first = questions[0]
        assert first.prompt == PLACEHOLDER_PROMPT
        assert first.answer == 0
        assert first.pending is True
        assert first.kind == "Word Problem 🌟 (Easy)"

    def test_every_slot_can_be_a_placeholder(self, easy_config):
        questions = build_questions(easy_config, lowest)
        assert placeholder_indices(questions) == list(range(10))

    def test_word_problems_only(self):
        cfg = QuizConfig(question_count=5, enabled_operations=set(), include_word_problems=True)
        questions = build_questions(cfg, random.Random(4).randint)
        assert all(q.is_word_problem and q.pending for q in questions)

    def test_no_placeholders_when_words_disabled(self):
        cfg = QuizConfig(question_count=20, include_word_problems=False)
        questions = build_questions(cfg, random.Random(9).randint)
        assert placeholder_indices(questions) == []
        assert {q.kind for q in questions} <= {"Addition", "Subtraction"}

    def test_seed_makes_quiz_reproducible(self):
        cfg = QuizConfig(question_count=12, seed=1234)
        assert build_questions(cfg) == build_questions(cfg)

    def test_placeholder_indices_are_ordered(self):
        qs = [
            Question(prompt="x", kind="Addition", answer=1),
            Question(prompt="y", kind="Word Problem 🌟 (Easy)", answer=3),
            Question(prompt="z", kind="Division", answer=1),
            Question(prompt="w", kind="Word Problem 🌟 (Easy)", answer=3),
        ]
        assert placeholder_indices(qs) == [1, 3]


class TestQuizConfig:
    @pytest.mark.parametrize("raw,expected", [(3, 5), (50, 20), (12, 12), ("abc", 10), ("7", 7)])
    def test_question_count_is_clamped(self, raw, expected):
        assert QuizConfig(question_count=raw).question_count == expected

    def test_defaults(self):
        cfg = QuizConfig()
        assert cfg.question_count == 10
        assert cfg.difficulty == Difficulty.EASY
        assert cfg.enabled_operations == {Operation.ADD, Operation.SUB}
        assert cfg.include_word_problems is True

    def test_effective_operations_order(self):
        cfg = QuizConfig(enabled_operations={Operation.DIV, Operation.ADD})
        assert cfg.effective_operations() == [Operation.ADD, Operation.DIV]


class TestGrading:
    @pytest.mark.parametrize(
        "text,expected",
        [("7", True), (" 7 ", True), ("+7", True), ("seven", False), ("", False), ("7.0", False), ("8", False)],
    )
    def test_single_answer(self, text, expected):
        q = Question(prompt="3 + 4 = ?", kind="Addition", answer=7, user_answer=text)
        graded, score = grade_questions([q])
        assert graded[0].is_correct is expected
        assert score.as_tuple() == (int(expected), 1)

    def test_parse_answer(self):
        assert parse_answer(" -3 ") == -3
        assert parse_answer("1_000") is None
        assert parse_answer("  ") is None

    def test_pending_placeholder_is_always_wrong(self):
        q = Question(prompt=PLACEHOLDER_PROMPT, kind="Word Problem 🌟 (Easy)", answer=0, user_answer="0", pending=True)
        graded, score = grade_questions([q])
        assert graded[0].is_correct is False
        assert score.correct == 0

    def test_does_not_mutate_input(self, five_questions):
        five_questions[0].user_answer = "2"
        grade_questions(five_questions)
        assert five_questions[0].is_correct is None

    def test_score_recomputed_from_scratch(self, five_questions):
        answered = [q.model_copy(update={"user_answer": str(q.answer)}) for q in five_questions]
        graded, score = grade_questions(answered)
        assert score.as_tuple() == (5, 5)

        changed = apply_answer(graded, 0, "99")
        _, score = grade_questions(changed)
        assert score.as_tuple() == (4, 5)

    def test_reset_after_grading(self, five_questions):
        answers = ["2", "7", "5", "wrong", ""]
        answered = [q.model_copy(update={"user_answer": a}) for q, a in zip(five_questions, answers)]
        graded, score = grade_questions(answered)
        assert score.as_tuple() == (3, 5)

        cleared, score = reset_questions(graded)
        assert score.as_tuple() == (0, 5)
        assert all(q.user_answer == "" and q.is_correct is None for q in cleared)

    def test_editing_answer_clears_only_that_flag(self, five_questions):
        graded, _ = grade_questions(five_questions)
        edited = apply_answer(graded, 2, "5")
        assert edited[2].is_correct is None
        assert edited[2].user_answer == "5"
        assert all(q.is_correct is False for i, q in enumerate(edited) if i != 2)
        assert graded[2].user_answer == ""


class TestScore:
    def test_messages(self):
        assert Score(correct=5, total=5).message.startswith("Perfect score")
        assert Score(correct=3, total=6).message.startswith("Nice work")
        assert Score(correct=1, total=6).message.startswith("Great practice round")
        assert Score(correct=2, total=3).percent == 67
        assert Score(correct=0, total=0).percent == 0

    def test_no_message_without_questions(self):
        assert Score(correct=0, total=0).message == ""
        assert Score().message == ""
