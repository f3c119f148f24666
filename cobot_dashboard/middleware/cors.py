"""Cross-origin headers for embedding in the Chatwoot dashboard widget.

Starlette's ``CORSMiddleware`` answers preflight requests but only decorates
responses to requests that carry an ``Origin`` header.  The widget iframe
also loads the API without one, so every response gets the headers here.
"""

from __future__ import annotations

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

WIDGET_ALLOWED_HEADERS = ["Origin", "X-Requested-With", "Content-Type", "Accept"]

WIDGET_CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(WIDGET_ALLOWED_HEADERS),
}


class WidgetCORSHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for header, value in WIDGET_CORS_HEADERS.items():
            response.headers.setdefault(header, value)
        return response
