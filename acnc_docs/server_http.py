#!/usr/bin/env python3
"""
ACNC HTTP/SSE Server - Hexagonal Architecture

JSON API for downstream pipelines plus the MCP SSE transport, both backed
by the same dependency injection container.

Run with: poetry run python -m acnc_docs.server_http
(or: poetry run uvicorn acnc_docs.server_http:app --host 127.0.0.1 --port 3000)

Routes:
- GET  /                     plain-text readiness banner
- GET  /ping                 health check
- POST /fetchAcncFinancials  {"abn": "...", "pdfText": "none|preview|full"}
- GET  /sse, POST /messages  MCP over SSE

Configuration: see acnc_docs.config (PORT, HOST, SCRAPER_TOKEN, LOG_LEVEL, ...)
"""

import json
import logging
import re
import signal
from datetime import datetime, timezone
from typing import Any

from mcp.server import Server
from mcp.server.sse import SseServerTransport
from mcp.types import TextContent, Tool
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Mount, Route

from .container import Container
from .adapters.mcp import TOOL_SCHEMAS, MCPHandlers
from .core.errors import AcncError, InvalidInput
from .formatters import format_fetch_financials

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y/%m/%d %H:%M:%S"

MAX_BODY_BYTES = 256 * 1024
BEARER_RE = re.compile(r"^Bearer\s+", re.IGNORECASE)


class MillisecondFormatter(logging.Formatter):
    """Custom formatter with milliseconds as :XXXX format"""
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        """Override formatTime to include milliseconds with : separator"""
        ct = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            s = ct.strftime(LOG_DATEFMT)
            ms = int((record.created % 1) * 10000)
            return f"{s}:{ms:04d}"
        return super().formatTime(record, datefmt)


def configure_logging(level: str = "INFO") -> None:
    """Root logging with millisecond precision"""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logging.getLogger().setLevel(level)

    # Apply custom formatter to root logger
    for handler in logging.root.handlers:
        handler.setFormatter(MillisecondFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT))

    logging.getLogger("httpx").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


def is_authorized(request: Request, token: str) -> bool:
    """Bearer check; an empty token disables auth"""
    if not token:
        return True
    got = BEARER_RE.sub("", request.headers.get("authorization", ""))
    return got == token


async def read_json_body(request: Request) -> tuple[dict[str, Any] | None, Response | None]:
    """Parse a size-limited JSON object body, or return the error response"""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > MAX_BODY_BYTES:
        return None, JSONResponse({"error": "Request body too large"}, status_code=413)

    raw = await request.body()
    if len(raw) > MAX_BODY_BYTES:
        return None, JSONResponse({"error": "Request body too large"}, status_code=413)
    if not raw.strip():
        return {}, None

    try:
        body = json.loads(raw)
    except ValueError:
        return None, JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    return (body if isinstance(body, dict) else {}), None


def create_app(container: Container) -> Starlette:
    """Build the Starlette app around an already-wired container"""
    settings = container.settings
    service = container.fetch_financials
    handlers = MCPHandlers(container)

    # MCP Server instance
    mcp_server = Server("acnc-docs")

    # SSE transport for multi-client support
    sse_transport = SseServerTransport("/messages")

    @mcp_server.list_tools()  # type: ignore[misc,no-untyped-call]
    async def list_tools() -> list[Tool]:
        """List available MCP tools"""
        return [Tool(**schema) for schema in TOOL_SCHEMAS.values()]

    @mcp_server.call_tool()  # type: ignore[misc,no-untyped-call]
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle tool calls"""
        logger.info(f"call_tool: {name} args={arguments}")

        if name != "fetch_acnc_financials":
            raise ValueError(f"Unknown tool: {name}")

        result = await handlers.fetch_acnc_financials(
            abn=arguments.get("abn", ""),
            pdf_text=arguments.get("pdf_text")
        )
        formatted_text = format_fetch_financials(result)

        logger.info(f"call_tool: {name} returning {len(formatted_text)} chars")
        return [TextContent(type="text", text=formatted_text)]

    # HTTP routes
    async def handle_root(request: Request) -> Response:
        return PlainTextResponse("ACNC scraper ready")

    async def handle_ping(request: Request) -> Response:
        """Health check endpoint"""
        return JSONResponse({"status": "ok"})

    async def handle_fetch(request: Request) -> Response:
        """Resolve an ABN to its latest AIS and Financial Report"""
        if not is_authorized(request, settings.token):
            return JSONResponse({"error": "Unauthorized"}, status_code=401)

        body, error_response = await read_json_body(request)
        if error_response is not None:
            return error_response

        try:
            result = await service.execute(body.get("abn"), body.get("pdfText"))
        except InvalidInput as e:
            return JSONResponse(e.to_dict(), status_code=400)
        except AcncError as e:
            return JSONResponse(e.to_dict(), status_code=500)

        return JSONResponse(result.to_dict())

    async def handle_sse(request: Request) -> Response:
        """SSE endpoint for MCP communication"""
        client_addr = request.client.host if request.client else "unknown"
        logger.info(f"SSE connect from {client_addr}")
        async with sse_transport.connect_sse(
            request.scope, request.receive, request._send
        ) as streams:
            logger.info(f"SSE session started for {client_addr}")
            await mcp_server.run(
                streams[0], streams[1], mcp_server.create_initialization_options()
            )
            logger.info(f"SSE disconnect from {client_addr}")
        return Response()

    routes = [
        Route("/", handle_root),
        Route("/ping", handle_ping),
        Route("/fetchAcncFinancials", handle_fetch, methods=["POST"]),
        Route("/sse", handle_sse),
        Mount("/messages", app=sse_transport.handle_post_message),
    ]

    return Starlette(routes=routes)


# Initialize dependency injection container
container = Container()
configure_logging(container.settings.log_level)

app = create_app(container)


# Graceful shutdown on SIGTERM
def handle_sigterm(signum, frame):
    logger.info("Received SIGTERM, shutting down gracefully...")
    import sys
    sys.exit(0)


signal.signal(signal.SIGTERM, handle_sigterm)


if __name__ == "__main__":
    import uvicorn
    settings = container.settings
    logger.info(f"Starting ACNC server on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
