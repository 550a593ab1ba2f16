"""REST API for the session store.

Endpoints:
  GET    /health                       - Liveness + session count
  POST   /sessions                     - Create a session
  GET    /sessions/{id}                - Canonical serialized session
  PUT    /sessions/{id}                - Restore a session from serialized form
  DELETE /sessions/{id}                - Drop a session
  POST   /sessions/{id}/ask            - User turn from {"text"} or {"parts"}
  POST   /sessions/{id}/reply          - Model turn from {"text"} or {"parts"}
  POST   /sessions/{id}/turns          - Replay a persisted turn (history_replay)
  GET    /sessions/{id}/text           - Display text of the last turn
  GET    /sessions/{id}/labels         - Status labels of the last turn

{"parts"} bodies are accepted only when structured_ingestion is enabled.
Malformed payloads never escape as a 500: ask/turns record them in-band,
reply answers 422.
"""

from __future__ import annotations

import logging
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from tripsession.api.registry import SessionNotFound, SessionRegistry
from tripsession.config import Settings
from tripsession.session import EmptySession, ParseError

logger = logging.getLogger(__name__)

STRUCTURED_DISABLED = "Structured ingestion is disabled; send {\"text\"}"


def create_app(
    registry: SessionRegistry,
    settings: Settings,
    lifespan: Any | None = None,
) -> Starlette:
    """Create the Starlette ASGI app with all routes."""

    async def health(request: Request) -> JSONResponse:
        """GET /health"""
        return JSONResponse({"status": "ok", "sessions": len(registry)})

    async def create_session(request: Request) -> JSONResponse:
        """POST /sessions - Optional {"session_id", "window"}."""
        body: Any = {}
        if await request.body():
            try:
                body = await request.json()
            except ValueError:
                return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
        if not isinstance(body, dict):
            return JSONResponse({"error": "JSON body must be an object"}, status_code=400)

        session_id = body.get("session_id")
        if session_id is not None and not isinstance(session_id, str):
            return JSONResponse({"error": "session_id must be a string"}, status_code=400)

        try:
            session_id = registry.create(session_id, window=body.get("window"))
        except ValueError as e:
            return JSONResponse({"error": str(e)}, status_code=400)
        session = registry.get(session_id)
        return JSONResponse(
            {"session_id": session_id, "window": session.window}, status_code=201
        )

    async def get_session(request: Request) -> Response:
        """GET /sessions/{id} - Canonical serialized form, byte for byte."""
        try:
            session = registry.get(request.path_params["session_id"])
        except SessionNotFound as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        return Response(session.serialize(), media_type="application/json")

    async def put_session(request: Request) -> JSONResponse:
        """PUT /sessions/{id} - Body is the canonical serialized form."""
        session_id = request.path_params["session_id"]
        try:
            session = registry.restore(session_id, await request.body())
        except ParseError as e:
            logger.warning("Rejected snapshot for session %s: %s", session_id, e)
            return JSONResponse({"error": str(e), "kind": "ParseError"}, status_code=422)
        return JSONResponse({"session_id": session_id, "turns": len(session)})

    async def delete_session(request: Request) -> JSONResponse:
        """DELETE /sessions/{id}"""
        session_id = request.path_params["session_id"]
        try:
            registry.drop(session_id)
        except SessionNotFound as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        return JSONResponse({"status": "dropped", "session_id": session_id})

    async def ask(request: Request) -> JSONResponse:
        """POST /sessions/{id}/ask"""
        try:
            session = registry.get(request.path_params["session_id"])
        except SessionNotFound as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
        if not isinstance(body, dict):
            return JSONResponse({"error": "JSON body must be an object"}, status_code=400)

        if "parts" in body:
            if not settings.structured_ingestion:
                return JSONResponse({"error": STRUCTURED_DISABLED}, status_code=400)
            # Malformed parts are recorded in-band, never rejected
            session.ask_structured(body["parts"])
        else:
            text = body.get("text")
            if not isinstance(text, str):
                return JSONResponse(
                    {"error": "Missing required field: text or parts"}, status_code=400
                )
            session.ask(text)
        return JSONResponse({"turns": len(session)})

    async def reply(request: Request) -> JSONResponse:
        """POST /sessions/{id}/reply"""
        try:
            session = registry.get(request.path_params["session_id"])
        except SessionNotFound as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
        if not isinstance(body, dict):
            return JSONResponse({"error": "JSON body must be an object"}, status_code=400)

        if "parts" in body:
            if not settings.structured_ingestion:
                return JSONResponse({"error": STRUCTURED_DISABLED}, status_code=400)
            try:
                session.reply_structured(body["parts"])
            except ParseError as e:
                return JSONResponse({"error": str(e), "kind": "ParseError"}, status_code=422)
        else:
            text = body.get("text")
            if not isinstance(text, str):
                return JSONResponse(
                    {"error": "Missing required field: text or parts"}, status_code=400
                )
            session.reply(text)
        return JSONResponse({"turns": len(session)})

    async def append_turn(request: Request) -> JSONResponse:
        """POST /sessions/{id}/turns - {"turn": {...}} or {"turn": "<json>"}."""
        try:
            session = registry.get(request.path_params["session_id"])
        except SessionNotFound as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
        if not isinstance(body, dict) or "turn" not in body:
            return JSONResponse({"error": "Missing required field: turn"}, status_code=400)

        session.append_turn(body["turn"])
        return JSONResponse({"turns": len(session)})

    async def text(request: Request) -> JSONResponse:
        """GET /sessions/{id}/text"""
        try:
            session = registry.get(request.path_params["session_id"])
            return JSONResponse({"text": session.display_text(settings.display_separator)})
        except SessionNotFound as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        except EmptySession as e:
            return JSONResponse({"error": str(e)}, status_code=409)

    async def labels(request: Request) -> JSONResponse:
        """GET /sessions/{id}/labels"""
        try:
            session = registry.get(request.path_params["session_id"])
            return JSONResponse({
                "labels": session.pending_labels(),
                "joined": session.pending_labels_text(),
            })
        except SessionNotFound as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        except EmptySession as e:
            return JSONResponse({"error": str(e)}, status_code=409)

    routes = [
        Route("/health", health, methods=["GET"]),
        Route("/sessions", create_session, methods=["POST"]),
        Route("/sessions/{session_id}", get_session, methods=["GET"]),
        Route("/sessions/{session_id}", put_session, methods=["PUT"]),
        Route("/sessions/{session_id}", delete_session, methods=["DELETE"]),
        Route("/sessions/{session_id}/ask", ask, methods=["POST"]),
        Route("/sessions/{session_id}/reply", reply, methods=["POST"]),
        Route("/sessions/{session_id}/text", text, methods=["GET"]),
        Route("/sessions/{session_id}/labels", labels, methods=["GET"]),
    ]
    if settings.history_replay:
        routes.append(
            Route("/sessions/{session_id}/turns", append_turn, methods=["POST"])
        )

    return Starlette(routes=routes, lifespan=lifespan)
