# main.py
import logging
import os
import tempfile

import uvicorn
from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware

import settings
from ai_provider import WordProblemClient, enrich, regenerate
from generator import (
    apply_answer,
    build_questions,
    grade_questions,
    placeholder_indices,
    reset_questions,
    sampler_for,
)
from pdf import render_pdf
from schema import AnswerUpdate, QuizConfig, QuizSnapshot
from store import QuizStore
from word_service import router as word_router

logging.basicConfig(level=settings.log_level())
logger = logging.getLogger("math-quest")


# ======================
# C O R S   S E T U P
# ======================
app = FastAPI(title="Math Quest Quiz API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
    max_age=86400,
)

app.include_router(word_router)  # /api/word-problem

app.state.store = QuizStore()
app.state.word_client = WordProblemClient()


def get_store(request: Request) -> QuizStore:
    return request.app.state.store


def get_word_client(request: Request) -> WordProblemClient:
    return request.app.state.word_client


# ======================
# H E A L T H   C H E C K
# ======================
@app.get("/")
def root():
    return {"status": "ok", "service": "math-quest"}


@app.get("/api/health")
def health():
    return {"ok": True}


# ======================
# H E L P E R S
# ======================
def _check_index(store: QuizStore, index: int) -> None:
    if not 0 <= index < len(store.get()):
        raise HTTPException(404, f"Question {index} not found")


def _export(store: QuizStore, title: str, suffix: str, with_answers: bool) -> Response:
    fd, path = tempfile.mkstemp(suffix=f"_{suffix}.pdf")
    os.close(fd)
    render_pdf(path, title, store.get(), with_answers=with_answers)
    try:
        with open(path, "rb") as f:
            data = f.read()
    finally:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("could not remove %s: %s", path, e)

    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=quiz_{suffix}.pdf"},
    )


# ======================
# A P I   R O U T E S
# ======================
@app.get("/api/config", response_model=QuizConfig)
async def api_get_config(store: QuizStore = Depends(get_store)) -> QuizConfig:
    return store.config


@app.put("/api/config", response_model=QuizConfig)
async def api_put_config(cfg: QuizConfig, store: QuizStore = Depends(get_store)) -> QuizConfig:
    store.set_config(cfg)
    return store.config


@app.post("/api/quiz", response_model=QuizSnapshot)
async def api_generate(
    background_tasks: BackgroundTasks,
    store: QuizStore = Depends(get_store),
    client: WordProblemClient = Depends(get_word_client),
) -> QuizSnapshot:
    cfg = store.config
    randint = sampler_for(cfg)
    questions = build_questions(cfg, randint)
    indices = placeholder_indices(questions)
    logger.info("created %d questions; %d AI placeholders", len(questions), len(indices))

    # skeleton goes out first, word problems fill in after the response
    generation = store.publish_quiz(questions, randint)
    background_tasks.add_task(enrich, store, indices, cfg, client, randint, generation)
    return store.snapshot()


@app.get("/api/quiz", response_model=QuizSnapshot)
async def api_get_quiz(store: QuizStore = Depends(get_store)) -> QuizSnapshot:
    return store.snapshot()


@app.put("/api/quiz/{index}/answer", response_model=QuizSnapshot)
async def api_answer(index: int, body: AnswerUpdate, store: QuizStore = Depends(get_store)) -> QuizSnapshot:
    _check_index(store, index)
    store.set(apply_answer(store.get(), index, body.user_answer))
    return store.snapshot()


@app.post("/api/quiz/{index}/regenerate", response_model=QuizSnapshot)
async def api_regenerate(
    index: int,
    store: QuizStore = Depends(get_store),
    client: WordProblemClient = Depends(get_word_client),
) -> QuizSnapshot:
    _check_index(store, index)
    if not store.get()[index].is_word_problem:
        raise HTTPException(400, "Only word problems can be regenerated")
    await regenerate(store, index, store.config, client)
    return store.snapshot()


@app.post("/api/quiz/grade", response_model=QuizSnapshot)
async def api_grade(store: QuizStore = Depends(get_store)) -> QuizSnapshot:
    graded, score = grade_questions(store.get())
    store.set_score(score)
    store.set(graded)
    store.set_show_results(True)
    return store.snapshot()


@app.post("/api/quiz/reset", response_model=QuizSnapshot)
async def api_reset(store: QuizStore = Depends(get_store)) -> QuizSnapshot:
    cleared, score = reset_questions(store.get())
    store.set_score(score)
    store.set(cleared)
    store.set_show_results(False)
    return store.snapshot()


@app.get("/api/export/questions")
async def api_export_questions(store: QuizStore = Depends(get_store)):
    return _export(store, "MATH QUEST - QUESTIONS", "questions", with_answers=False)


@app.get("/api/export/answers")
async def api_export_answers(store: QuizStore = Depends(get_store)):
    return _export(store, "MATH QUEST - ANSWER KEY", "answers", with_answers=True)


def run() -> None:
    uvicorn.run(app, host=settings.host(), port=settings.port(), log_level=settings.log_level().lower())


if __name__ == "__main__":
    run()
