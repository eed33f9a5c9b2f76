import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dust_gold.config import get_settings
from dust_gold.core.exceptions import register_exception_handlers
from dust_gold.routers import items, providers, profile
from dust_gold.services.cache_service import CacheService
from dust_gold.services.http_client import HTTPClientManager

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    """
    # Startup
    print(f"🚀 Starting {settings.app_name}...")
    await HTTPClientManager.warmup()
    yield
    # Shutdown
    print(f"👋 Shutting down {settings.app_name}...")
    await HTTPClientManager.close()
    await CacheService.close()


app = FastAPI(
    title=settings.app_name,
    description="API for Dust & Gold - share and upvote music, books, movies and more",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(
    items.router,
    prefix=f"{settings.api_v1_prefix}/items",
    tags=["Items"]
)
app.include_router(
    providers.router,
    prefix=f"{settings.api_v1_prefix}/provider-search",
    tags=["Providers"]
)
app.include_router(
    profile.router,
    prefix=f"{settings.api_v1_prefix}/profile",
    tags=["Profile"]
)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API info."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
