import logging
from typing import List, Optional, Tuple

import httpx
from pydantic import ValidationError

import settings
from generator import MAX_NUMBER, Sampler, generate_fallback_word_problem
from schema import Difficulty, QuizConfig, WordProblemRequest, WordProblemResponse, word_problem_kind
from store import QuizStore

logger = logging.getLogger(__name__)


class WordProblemClient:
    """Talks to the word-problem service. One POST per problem, no retry."""

    def __init__(self, url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url or settings.word_problem_url()
        self._transport = transport

    async def fetch(self, difficulty: Difficulty) -> Optional[WordProblemResponse]:
        body = WordProblemRequest(difficulty=difficulty.code, max_number=MAX_NUMBER[difficulty])
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(
                    self.url,
                    json=body.model_dump(),
                    headers={"Content-Type": "application/json"},
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("word problem request failed: %s", e)
            return None

        if not resp.is_success:
            logger.warning("word problem service returned HTTP %d", resp.status_code)
            return None

        try:
            data = WordProblemResponse.model_validate_json(resp.content)
        except ValidationError as e:
            logger.warning("malformed word problem response: %s", e.errors(include_url=False))
            return None
        logger.debug("word problem service returned JSON")
        return data


async def resolve_word_problem(
    cfg: QuizConfig, client: WordProblemClient, randint: Sampler
) -> Tuple[str, int, str, bool]:
    """Fetch one word problem, or build the local one if the service is unavailable.

    Returns (prompt, answer, kind, from_service).
    """
    data = await client.fetch(cfg.difficulty)
    if data is None:
        prompt, answer, kind = generate_fallback_word_problem(cfg.difficulty, randint)
        return prompt, answer, kind, False
    return data.prompt, data.answer, word_problem_kind(cfg.difficulty), True


def _write_slot(
    store: QuizStore, generation: int, idx: int, prompt: str, answer: int, kind: str, tag: str
) -> bool:
    # read-modify-write on the latest snapshot; no await in between
    if store.generation != generation:
        logger.info("%s: idx %d -> quiz %d was replaced, dropping result", tag, idx, generation)
        return False
    qs = store.get()
    if idx >= len(qs):
        logger.warning("%s: idx %d out of range on update", tag, idx)
        return False
    qs[idx] = qs[idx].model_copy(
        update={"prompt": prompt, "answer": answer, "kind": kind, "pending": False, "is_correct": None}
    )
    store.set(qs)
    return True


async def enrich(
    store: QuizStore,
    indices: List[int],
    cfg: QuizConfig,
    client: WordProblemClient,
    randint: Optional[Sampler] = None,
    generation: Optional[int] = None,
) -> int:
    """Fill word-problem placeholders one at a time, in index order.

    The store is republished after every slot. Stops early if a newer quiz
    replaces the one this run was started for. Returns the number of
    slots written.
    """
    if randint is None:
        randint = store.sampler
    if generation is None:
        generation = store.generation

    written = 0
    for idx in sorted(indices):
        logger.info("AI fill: idx %d -> calling service", idx)
        prompt, answer, kind, from_service = await resolve_word_problem(cfg, client, randint)
        logger.info("AI fill: idx %d -> %s", idx, "got AI result" if from_service else "using fallback")
        if _write_slot(store, generation, idx, prompt, answer, kind, "AI fill"):
            written += 1
        elif store.generation != generation:
            break
    return written


async def regenerate(
    store: QuizStore,
    index: int,
    cfg: QuizConfig,
    client: WordProblemClient,
    randint: Optional[Sampler] = None,
) -> bool:
    """Swap one word problem for a fresh one ("try another problem").

    Not coordinated with a running enrich() on the same quiz; whichever
    write lands last on a slot wins.
    """
    if randint is None:
        randint = store.sampler
    generation = store.generation
    logger.info("Regen: idx %d -> calling service", index)
    prompt, answer, kind, from_service = await resolve_word_problem(cfg, client, randint)
    logger.info("Regen: idx %d -> %s", index, "got AI result" if from_service else "using fallback")
    return _write_slot(store, generation, index, prompt, answer, kind, "Regen")
