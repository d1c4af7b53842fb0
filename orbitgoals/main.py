from contextlib import asynccontextmanager

from fastapi import FastAPI

from orbitgoals.config import settings
from orbitgoals.engine.coach_router import router as coach_router
from orbitgoals.engine.leaderboard_router import router as leaderboard_router
from orbitgoals.engine.rewards_router import admin_router, router as rewards_router
from orbitgoals.engine.router import router as habits_router
from orbitgoals.logging_config import setup_logging
from orbitgoals.services import get_sync

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    # Let in-flight leaderboard pushes finish before the loop closes
    await get_sync().drain()


app = FastAPI(title="OrbitGoals", version="0.1.0", lifespan=lifespan)
app.include_router(habits_router)
app.include_router(leaderboard_router)
app.include_router(rewards_router)
app.include_router(admin_router)
app.include_router(coach_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "orbit": {
            "goals": "/orbit/goals",
            "logs": "/orbit/logs/{date}/{goal_id}",
            "stats": "/orbit/stats",
            "achievements": "/orbit/achievements",
            "leaderboard": "/orbit/leaderboard",
            "shop": "/orbit/shop/items",
            "spin": "/orbit/spin",
            "payments": "/orbit/payments",
            "coach": "/orbit/coach/analysis",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
