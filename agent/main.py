"""Agent service main application.

Accepts free-text shopping messages, drives the market API and replies
with a synthesized message. Also proxies order lookups and serves the
plugin manifest and OpenAPI documents.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

import structlog
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from agent.config import settings
from agent.market_client import get_market_client
from agent.schemas import AgentReply, MessageRequest
from agent.service import ShoppingAgent, UpstreamError
from agent.sessions import SessionStore, get_session_store

STATIC_DIR = Path(__file__).parent / "static"

UPSTREAM_HINT = "MARKET_BASE doğru mu? Market servisi erişilebilir mi?"


# ============================================================================
# Logging
# ============================================================================

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting agent", port=settings.port, market_base=settings.market_base)

    yield

    await get_market_client().close()
    logger.info("Agent shutdown complete")


app = FastAPI(
    title="ACP Shopping Agent",
    description="Conversational agent driving the ACP market",
    version="0.1.0",
    lifespan=lifespan,
    openapi_url="/docs/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount(
    "/.well-known",
    StaticFiles(directory=STATIC_DIR / ".well-known", check_dir=False),
    name="well-known",
)


# ============================================================================
# Dependencies
# ============================================================================


def get_agent() -> ShoppingAgent:
    """Get shopping agent dependency."""
    return ShoppingAgent(
        market=get_market_client(),
        buyer_name=settings.buyer_name,
        payment_token=settings.payment_token,
        default_query=settings.default_query,
    )


def get_sessions() -> SessionStore:
    """Get session store dependency."""
    return get_session_store()


# ============================================================================
# Health & Static Documents
# ============================================================================


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Check service health."""
    return {
        "status": "ok",
        "service": settings.service_name,
        "market_base": settings.market_base,
    }


def _static_document(name: str, media_type: str):
    path = STATIC_DIR / name
    if not path.is_file():
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": f"{name} not found"},
        )
    return FileResponse(path, media_type=media_type)


@app.get("/openapi.yaml", include_in_schema=False)
async def openapi_yaml():
    """Serve the hand-written OpenAPI YAML document."""
    return _static_document("openapi.yaml", "text/yaml; charset=utf-8")


@app.get("/openapi.json", include_in_schema=False)
async def openapi_json():
    """Serve the hand-written OpenAPI JSON document, if shipped."""
    return _static_document("openapi.json", "application/json; charset=utf-8")


# ============================================================================
# Agent Endpoints
# ============================================================================


@app.get("/agent/message", tags=["Agent"])
async def message_usage(request: Request) -> dict:
    """Describe how to call the message endpoint."""
    base = settings.agent_base or str(request.base_url)
    return {
        "info": "Bu endpoint POST ile kullanılmalı.",
        "example": {
            "method": "POST",
            "url": f"{base.rstrip('/')}/agent/message",
            "body": {"message": "süt ürünleri ekle"},
        },
    }


async def _read_message_request(request: Request) -> MessageRequest | None:
    """Parse the message body leniently.

    A missing, non-JSON or malformed body yields None so the caller
    gets the agent's 400 rather than a validation error.
    """
    try:
        data = await request.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return MessageRequest.model_validate(data)
    except ValidationError:
        return None


@app.post(
    "/agent/message",
    response_model=AgentReply,
    response_model_exclude_none=True,
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": MessageRequest.model_json_schema()}
            },
        }
    },
    tags=["Agent"],
)
async def post_message(
    request: Request,
    agent: Annotated[ShoppingAgent, Depends(get_agent)],
    sessions: Annotated[SessionStore, Depends(get_sessions)],
):
    """Handle a shopping message.

    Returns:
        Agent reply, 400 if the message is missing, or 500 if the market
        could not be reached.
    """
    body = await _read_message_request(request)
    if body is None or not body.message:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "message required"},
        )

    context = sessions.resolve(session_id=body.session_id, cart_id=body.cart_id)
    try:
        return await agent.handle_message(body.message, context)
    finally:
        # A cart created before a failed add stays with the session
        sessions.save(context)


@app.get("/agent/order/{order_id}", tags=["Agent"])
async def get_order(
    order_id: str,
    agent: Annotated[ShoppingAgent, Depends(get_agent)],
):
    """Proxy an order lookup to the market."""
    try:
        return await agent.get_order(order_id)
    except UpstreamError as e:
        if e.status_code == status.HTTP_404_NOT_FOUND:
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"error": "Order not found"},
            )
        raise


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    """Surface market failures as 500 with a configuration hint."""
    logger.error(
        "Agent error",
        path=request.url.path,
        error=exc.message,
        upstream_status=exc.status_code,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": exc.message, "hint": UPSTREAM_HINT},
    )
