from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from api.src.config import get_settings
from api.src.db.database import init_db
from api.src.routes import health_router, runs_router, stats_router

logger = logging.getLogger(__name__)

settings = get_settings()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Stage Runner history API")
    init_db()
    yield
    # Shutdown
    logger.info("Shutting down Stage Runner history API")

app = FastAPI(
    title="Stage Runner",
    description="Recorded runs of the fail-fast stage runner",
    version="0.1.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router)
app.include_router(runs_router, prefix="/api")
app.include_router(stats_router, prefix="/api")

@app.get("/")
async def root():
    return {
        "name": "Stage Runner",
        "version": "0.1.0",
        "docs": "/docs"
    }

def run():
    """Serve the API with uvicorn."""
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)

if __name__ == "__main__":
    run()
