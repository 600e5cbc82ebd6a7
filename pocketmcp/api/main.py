"""FastAPI application exposing an McpServer over HTTP."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from pocketmcp.logic.mcp.protocol.transport import HttpTransport

if TYPE_CHECKING:
    from pocketmcp.logic.mcp.core.server import McpServer

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(server: "McpServer") -> FastAPI:
    """
    Create the FastAPI application for a server.

    Routes:
        POST    any path       JSON-RPC messages
        GET     /tools/list    plain JSON tools listing
        GET     /health        liveness and server identity
        GET     any path       event stream when ``sessionId`` is given, else 404
        OPTIONS any path       204 with CORS headers

    PUT, PATCH and DELETE are answered with 405.
    """
    transport = HttpTransport(server.handler)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"Starting MCP server {server.server_info.name} v{server.server_info.version}")
        yield
        logger.info("Shutting down MCP server")

    app = FastAPI(
        title=server.server_info.name,
        version=server.server_info.version,
        description="Model Context Protocol server",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/tools/list")
    async def tools_list():
        """Tools listing for manual testing."""
        return transport.tools_listing()

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "server": server.server_info.model_dump(),
        }

    @app.get("/{path:path}", include_in_schema=False)
    async def stream(request: Request, path: str) -> Response:
        """Event stream for clients that open a session."""
        if "sessionId" in request.query_params:
            return transport.event_stream()
        return PlainTextResponse("Not found", status_code=404)

    @app.post("/{path:path}", include_in_schema=False)
    async def rpc(request: Request, path: str) -> Response:
        """JSON-RPC endpoint."""
        return await transport.handle_http_request(request)

    @app.options("/{path:path}", include_in_schema=False)
    async def options(path: str) -> Response:
        return Response(status_code=204, headers=CORS_HEADERS)

    @app.api_route("/{path:path}", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
    async def method_not_allowed(path: str):
        return PlainTextResponse("Method not allowed", status_code=405)

    return app
