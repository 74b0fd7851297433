"""
Cart Sync - Main FastAPI Application

Single entry point for the cart record endpoints.
"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.db import close_redis
from core.logging import get_logger
from core.routers import cart_router

logger = get_logger(__name__)

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    logger.info("Starting cart service")
    yield
    await close_redis()
    logger.info("Cart service stopped")


app = FastAPI(
    title="Cart Sync",
    description="Per-user cart records for guest-to-account cart sync",
    version="1.0.0",
    lifespan=lifespan,
)

# The storefront runs on a different origin and sends bearer tokens
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cart_router)


# ==================== HEALTH CHECK ====================

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "cart-sync"}
