"""Repo-root Uvicorn entrypoint.

Allows running the backend from the repo root:

    JWT_SECRET=... uvicorn app.main:app --reload

This simply re-exports the FastAPI app built by `backend/app/main.py`; settings come
from the environment (or backend/.env).
"""

from backend.app.main import app  # re-export
