from typing import Dict
from contextlib import asynccontextmanager
from fastapi import FastAPI
from dotenv import load_dotenv
from prometheus_fastapi_instrumentator import Instrumentator
from pearch_gateway.api.routes import router
from pearch_gateway.utils.logger import logger

load_dotenv()

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    yield
    logger.info("Application shutting down...")

app: FastAPI = FastAPI(
    title="Pearch Search Gateway",
    description="Submits Pearch search tasks and waits for their results.",
    version="1.0.0",
    lifespan=lifespan
)

Instrumentator().instrument(app).expose(app)

app.include_router(router)

@app.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "ok"}
