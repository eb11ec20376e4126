"""Main FastAPI application for the Sudoku game service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import _get_stats_store, router


@asynccontextmanager
async def _app_lifespan(_: FastAPI):
    """Eagerly open the stats store so a bad SUDOKU_STATS_PATH fails at startup."""
    store, error = _get_stats_store()
    if store is None:
        raise RuntimeError(f"Failed to open stats store at startup: {error}")
    yield


app = FastAPI(
    title="Sudoku Elite API",
    description="API for generating, playing and solving Sudoku puzzles",
    version="1.0.0",
    lifespan=_app_lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Sudoku Elite API", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("sudoku_elite.main:app", host="0.0.0.0", port=8000, reload=True)
