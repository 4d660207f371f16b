import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from api.routes import chat

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logging.getLogger("lightkeeper").setLevel(settings.guardrails_log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Lightkeeper API")

    if settings.default_provider == "openai" and not settings.openai_api_key:
        logger.warning(
            "OPENAI_API_KEY is not set! Meeting chat requests will fail "
            "until a key is configured."
        )
    if settings.guardrails_strict_mode:
        logger.info("Guardrails strict mode enabled")

    yield
    logger.info("Shutting down Lightkeeper API")


app = FastAPI(
    title="Lightkeeper",
    description="Meeting assistant with PII guardrails in front of the LLM",
    version="0.1.0",
    lifespan=lifespan,
)

cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

app.include_router(chat.router, prefix="/api/chat", tags=["chat"])


@app.get("/api/health")
async def health():
    return {"status": "ok"}
