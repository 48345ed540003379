import logging
import random
from typing import Callable, List, Optional

from generator import Sampler
from schema import Question, QuizConfig, QuizSnapshot, Score, ScoreView

logger = logging.getLogger(__name__)

Listener = Callable[[List[Question]], None]


class QuizStore:
    """Holds the current quiz and is the only place it gets replaced.

    Readers get copies; writers build a new list and hand it to set().
    Nothing outside the store keeps a reference into its internals.
    """

    def __init__(self, config: Optional[QuizConfig] = None):
        self._config = config or QuizConfig()
        self._questions: List[Question] = []
        self._score = Score()
        self._show_results = False
        self._generation = 0
        self._sampler: Sampler = random.randint
        self._listeners: List[Listener] = []

    # config
    @property
    def config(self) -> QuizConfig:
        return self._config.model_copy(deep=True)

    def set_config(self, cfg: QuizConfig) -> None:
        self._config = cfg.model_copy(deep=True)

    # questions
    def get(self) -> List[Question]:
        return [q.model_copy() for q in self._questions]

    def set(self, questions: List[Question]) -> None:
        self._questions = [q.model_copy() for q in questions]
        for listener in list(self._listeners):
            listener(self.get())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def sampler(self) -> Sampler:
        return self._sampler

    def publish_quiz(self, questions: List[Question], randint: Optional[Sampler] = None) -> int:
        """Install a brand new quiz and return its generation token.

        randint is kept for later draws on this quiz (fallback fills and
        regenerates) so a seeded quiz keeps advancing one stream.
        """
        self._generation += 1
        self._sampler = randint or random.randint
        self._score = Score(correct=0, total=len(questions))
        self._show_results = False
        self.set(questions)
        logger.info("published quiz generation %d with %d questions", self._generation, len(questions))
        return self._generation

    # score
    @property
    def score(self) -> Score:
        return self._score.model_copy()

    def set_score(self, score: Score) -> None:
        self._score = score.model_copy()

    @property
    def show_results(self) -> bool:
        return self._show_results

    def set_show_results(self, value: bool) -> None:
        self._show_results = value

    def snapshot(self) -> QuizSnapshot:
        s = self._score
        return QuizSnapshot(
            config=self.config,
            questions=self.get(),
            score=ScoreView(correct=s.correct, total=s.total, percent=s.percent, message=s.message),
            show_results=self._show_results,
        )
