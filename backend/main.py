#!/usr/bin/env python3
"""
Party Room - backend entry point
"""

import logging
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from partyroom.core.config import settings
from partyroom.api import api_router
from partyroom.core.database import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger("partyroom")

app = FastAPI(
    title=settings.APP_NAME,
    description="Party game sessions: room codes, player lobby and realtime session sync",
    version=settings.VERSION
)

# CORS for the host and player web clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_router, prefix="/api")

@app.on_event("startup")
async def startup_event():
    """Initialise on startup"""
    logger.info("🚀 Starting Party Room backend...")
    await init_db()

@app.get("/")
async def root():
    """Root health check"""
    return {"message": f"{settings.APP_NAME} backend running", "status": "healthy"}

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "partyroom"}

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
