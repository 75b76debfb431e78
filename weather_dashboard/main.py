"""FastAPI application setup for the weather proxy."""

from fastapi import FastAPI

from .api import router as api_router

app = FastAPI(title="Weather Dashboard Proxy")


@app.get("/health")
def health():
    """Liveness probe; does not contact the provider."""
    return {"status": "ok"}


app.include_router(api_router)
