import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tugon_hints.config import get_settings
from tugon_hints.engine.registry import get_registry
from tugon_hints.routes.hints import router as hints_router

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())

# Build the hint store eagerly so content errors surface at startup
registry = get_registry()

app = FastAPI(
    title="Tugon Hints API",
    description="Adaptive hint resolution for step-by-step math exercises",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(hints_router, prefix="/api")


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "model": settings.gemini_text_model,
        "stub": settings.gemini_stub or not settings.gemini_api_key,
        "categories": len(registry.current),
    }
