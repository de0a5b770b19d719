import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.clock import SystemClock
from src.adapters.release_runner import IntervalReleaseRunner
from src.adapters.sqlite.repos import SQLiteContentRepo
from src.api.deps import Settings, get_settings
from src.app_shell.config import validate_ops_rules
from src.components.release import (
    ProcessReleasesInput,
    ReleaseRulesAdapter,
    SweepOutput,
    run_process_due_releases,
)
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger(__name__)


def build_release_runner(settings: Settings, rules: Rules) -> IntervalReleaseRunner:
    """Background sweep over the service database."""
    repo = SQLiteContentRepo(settings.db_path)
    clock = SystemClock()
    release_rules = ReleaseRulesAdapter(rules.model_dump())

    def sweep() -> SweepOutput:
        return run_process_due_releases(
            ProcessReleasesInput(), repo=repo, time_port=clock, rules=release_rules
        )

    return IntervalReleaseRunner(sweep, interval_seconds=rules.release.sweep_interval_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    runner: IntervalReleaseRunner | None = None
    if rules.release.in_process_sweep:
        runner = build_release_runner(settings, rules)
        runner.start()

    yield

    if runner is not None:
        runner.stop()


app = FastAPI(
    title="Premium Release Gate API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import premium  # noqa: E402

app.include_router(premium.router, prefix="/api/premium", tags=["Premium"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "premium-release-gate"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.api.main:app", host="127.0.0.1", port=8000)
