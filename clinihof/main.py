from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinihof.core.config import settings
from clinihof.core.errors import register_exception_handlers
from clinihof.core.logger import logger
from clinihof.core.redis import redis_client
from clinihof.db.session import init_db
from clinihof.middleware.log_middleware import LogMiddleware

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} API")
    await init_db()
    yield
    await redis_client.close()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LogMiddleware)

register_exception_handlers(app)

@app.get("/")
async def root():
    return {"message": "Welcome to CliniHOF API"}

from clinihof.api.api import api_router
app.include_router(api_router, prefix=settings.API_V1_STR)
