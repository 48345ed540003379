import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load the .env that sits next to the backend code
load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

DEFAULT_WORD_PROBLEM_URL = "http://127.0.0.1:8000/api/word-problem"


def word_problem_url() -> str:
    return os.getenv("WORD_PROBLEM_URL", DEFAULT_WORD_PROBLEM_URL)


def openai_api_key() -> str:
    return os.getenv("OPENAI_API_KEY", "")


def openai_model() -> str:
    return os.getenv("OPENAI_MODEL", "gpt-4o-mini")


def allowed_origins() -> List[str]:
    # e.g. ALLOWED_ORIGINS="http://localhost:3000,https://quiz.example.com"
    return [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def host() -> str:
    return os.getenv("HOST", "127.0.0.1")


def port() -> int:
    return int(os.getenv("PORT", "8000"))
