"""
FastAPI WebSocket Channel Chat Relay
Clients join a named channel and exchange messages with its live members
"""

from fastapi import FastAPI, WebSocket, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from contextlib import asynccontextmanager
from typing import Optional
import uvicorn

from relay import (
    ClientRegistry,
    ChannelIndex,
    MessageRouter,
    ConnectionLifecycle,
    get_logger,
    log_system_event,
    HOST,
    PORT,
    SERVER_IDENTIFICATION,
    CORS_ORIGINS,
    CORS_ALLOW_CREDENTIALS,
    WS_PING_INTERVAL,
    WS_PING_TIMEOUT
)

logger = get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    log_system_event("startup", "Channel chat relay starting up...")
    yield
    log_system_event("shutdown", "Channel chat relay shutting down...")

def create_app(registry: Optional[ClientRegistry] = None) -> FastAPI:
    """
    Build an application that owns its own registry and router

    Args:
        registry: Registry to serve from; a fresh one when omitted

    Returns:
        Configured FastAPI application
    """
    registry = registry or ClientRegistry()
    channel_index = ChannelIndex(registry)
    router = MessageRouter(registry, channel_index)
    lifecycle = ConnectionLifecycle(router)

    app = FastAPI(
        title="Channel Chat Relay",
        description="Real-time channel-based chat over WebSocket",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.registry = registry
    app.state.router = router

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=CORS_ALLOW_CREDENTIALS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        """Static identification string for plain HTTP requests"""
        return SERVER_IDENTIFICATION

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        try:
            connection_stats = await registry.get_connection_stats()
            return {
                "status": "healthy",
                "connections": connection_stats
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise HTTPException(status_code=503, detail="Service unavailable")

    @app.websocket("/")
    async def websocket_endpoint(websocket: WebSocket):
        """Chat relay WebSocket endpoint"""
        await lifecycle.serve(websocket)

    return app

app = create_app()

if __name__ == "__main__":
    logger.info("Starting Channel Chat Relay...")

    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=False,
        log_level="info",
        access_log=True,
        ws_ping_interval=WS_PING_INTERVAL,
        ws_ping_timeout=WS_PING_TIMEOUT,
    )
