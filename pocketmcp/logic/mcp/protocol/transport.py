"""
MCP HTTP Transport Layer

Binds the protocol handler to FastAPI: reads the raw request body, hands it
to the handler and renders the resulting McpReply as an HTTP response. Also
serves the connection stream and the plain tools listing used for manual
testing.
"""

import json
import logging
from typing import AsyncIterator

from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from .handler import ProtocolHandler
from .message import McpReply

logger = logging.getLogger(__name__)

CONNECTED_FRAME = 'data: {"type":"connected"}\n\n'


class HttpTransport:
    """
    HTTP transport layer for MCP protocol.

    Integrates with FastAPI to handle JSON-RPC over HTTP.
    """

    def __init__(self, handler: ProtocolHandler):
        """
        Initialize HTTP transport.

        Args:
            handler: Protocol handler for processing requests
        """
        self.handler = handler

    async def handle_http_request(self, request: Request) -> Response:
        """
        Handle an HTTP request containing a JSON-RPC message.

        Args:
            request: FastAPI request object

        Returns:
            200 with a result envelope, 204 with no body, or 500 with an
            error envelope
        """
        body = await request.body()
        reply = await self.handler.handle_message(body)
        return self._create_response(reply)

    def _create_response(self, reply: McpReply) -> Response:
        """
        Create FastAPI Response from a handler reply.

        Args:
            reply: Status and optional envelope

        Returns:
            FastAPI Response with proper headers
        """
        if reply.body is None:
            return Response(status_code=reply.status)
        return Response(
            content=json.dumps(reply.body),
            status_code=reply.status,
            media_type="application/json",
        )

    def tools_listing(self) -> JSONResponse:
        """Plain JSON tools listing, outside the JSON-RPC envelope."""
        return JSONResponse(
            content={"tools": [tool.to_wire() for tool in self.handler.tools.list()]}
        )

    def event_stream(self) -> StreamingResponse:
        """
        Open an event stream that announces the connection.

        Only the initial frame is written; there is no heartbeat.
        """

        async def frames() -> AsyncIterator[str]:
            yield CONNECTED_FRAME

        logger.debug("Opened event stream")
        return StreamingResponse(
            frames(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
            },
        )
