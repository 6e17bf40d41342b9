from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.exceptions.handlers import register_exception_handlers
from src.api.routes.auth import router as auth_router
from src.api.routes.grading import router as grading_router
from src.api.routes.simulations import router as simulations_router
from src.database import init_db
from src.logging_config import app_logger
from src.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    app_logger.info("Database ready")
    yield


app = FastAPI(
    title="Grade Simulator",
    version=settings.API_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

register_exception_handlers(app)


@app.get("/")
async def root():
    return {
        "project": "Grade Simulator",
        "version": settings.API_VERSION,
        "endpoints": [
            "POST /api/calculations/average",
            "POST /api/calculations/required-score",
            "POST /api/simulations",
            "GET /api/simulations?user_id=xxx",
            "GET /api/simulations/{id}",
            "DELETE /api/simulations/{id}",
            "POST /api/auth/sign-in",
            "POST /api/auth/sign-up",
            "POST /api/auth/password-reset",
        ],
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}

app.include_router(grading_router)
app.include_router(simulations_router)
app.include_router(auth_router)
