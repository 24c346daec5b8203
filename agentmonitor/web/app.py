"""FastAPI application: the monitor's HTTP JSON API and landing page."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agentmonitor.services.status_service import system_status

if TYPE_CHECKING:
    from agentmonitor.context import AppContext

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_LIMIT = 50
MAX_ACTIVITY_LIMIT = 200


class PrettyJSONResponse(JSONResponse):
    def render(self, content: Any) -> bytes:
        return json.dumps(content, indent=2).encode("utf-8")


def _int_param(value: str | None) -> int:
    """Lenient integer query parameter; anything unparseable reads as 0."""
    try:
        return int(float(value)) if value else 0
    except (ValueError, OverflowError):
        return 0


async def _read_payload(request: Request) -> dict:
    """Parse a JSON object body. An empty body is an empty object."""
    raw = await request.body()
    try:
        payload = json.loads(raw or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError("Invalid payload") from e
    if not isinstance(payload, dict):
        raise ValueError("Invalid payload")
    return payload


def _text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value)


def stamp_index(html: str, build_id: str) -> str:
    """Inject the build id script before </head>, or before </body> without a head."""
    stamp = f"<script>window.__MONITOR_BUILD__={json.dumps(build_id)};</script>"
    if "</head>" in html:
        return html.replace("</head>", f"{stamp}</head>", 1)
    return html.replace("</body>", f"{stamp}</body>", 1)


def create_app(ctx: AppContext) -> FastAPI:
    """Build the app around an AppContext. The lifespan runs the sweeps."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await ctx.initialize()
        try:
            yield
        finally:
            await ctx.close()

    app = FastAPI(
        title="Agent Monitor",
        lifespan=lifespan,
        default_response_class=PrettyJSONResponse,
    )
    app.state.ctx = ctx
    ui_dir = ctx.config.server.resolved_ui_dir

    @app.exception_handler(ValueError)
    async def invalid_input(request: Request, exc: ValueError):
        return PlainTextResponse(str(exc) or "Invalid payload", status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def plain_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return PlainTextResponse("Not found", status_code=404)
        if exc.status_code == 405:
            return PlainTextResponse("Method not allowed", status_code=405)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    # --- Status ---

    @app.get("/api/status")
    async def get_status(date: str | None = None):
        return ctx.status_service.build(date or None).to_doc()

    @app.get("/api/activity")
    async def get_activity(limit: str | None = None):
        size = _int_param(limit) or DEFAULT_ACTIVITY_LIMIT
        size = max(1, min(MAX_ACTIVITY_LIMIT, size))
        entries = ctx.activity_service.tail(size)
        return {"entries": [e.to_doc() for e in entries]}

    @app.get("/api/system/status")
    async def get_system_status():
        return system_status(ctx.config.dispatch.agentd_socket, ctx.state_dir)

    @app.post("/api/inbox/mark")
    async def mark_inbox(request: Request):
        payload = await _read_payload(request)
        try:
            await ctx.chat_service.mark_inbox(
                _text(payload.get("agent")),
                _text(payload.get("channel")),
                _text(payload.get("status")),
                _text(payload.get("message_id")),
            )
        except OSError:
            logger.warning("Failed to write inbox update", exc_info=True)
            return PlainTextResponse("Failed to write inbox update", status_code=500)
        return {"ok": True}

    # --- Chat ---

    @app.get("/api/chat/summary")
    async def get_chat_summary():
        return {"channels": [s.to_doc() for s in ctx.chat_service.summary()]}

    @app.post("/api/chat/prewarm")
    async def prewarm(request: Request):
        payload = await _read_payload(request)
        agents = payload.get("agents")
        if not isinstance(agents, list):
            agents = []
        ok = await ctx.chat_service.prewarm([str(a) for a in agents])
        return {"ok": ok}

    @app.get("/api/chat/{channel:path}")
    async def get_chat(channel: str, limit: str | None = None, before: str | None = None):
        page = ctx.chat_service.history(channel, _int_param(limit), _int_param(before))
        return page.to_doc()

    @app.delete("/api/chat/{channel:path}")
    async def delete_chat(channel: str):
        return {"ok": True, "deleted": ctx.chat_service.clear(channel)}

    @app.post("/api/chat/{channel:path}")
    async def post_chat(channel: str, request: Request):
        payload = await _read_payload(request)
        await ctx.chat_service.post_message(
            channel, _text(payload.get("agent")), _text(payload.get("message"))
        )
        return {"ok": True}

    @app.post("/api/agents/nudge")
    async def nudge(request: Request):
        payload = await _read_payload(request)
        await ctx.chat_service.nudge(_text(payload.get("agent")), _text(payload.get("message")))
        return {"ok": True}

    # --- Landing page ---

    @app.get("/", response_class=HTMLResponse)
    @app.get("/index.html", response_class=HTMLResponse)
    async def index():
        index_path = ui_dir / "index.html"
        if not index_path.is_file():
            raise StarletteHTTPException(status_code=404)
        html = index_path.read_text(encoding="utf-8")
        return HTMLResponse(stamp_index(html, ctx.build_id))

    @app.get("/assets/{rel_path:path}")
    async def asset(rel_path: str):
        base = (ui_dir / "assets").resolve()
        target = (base / rel_path).resolve()
        if not target.is_relative_to(base) or not target.is_file():
            logger.info("Asset not found: %s", rel_path)
            raise StarletteHTTPException(status_code=404)
        return FileResponse(target)

    return app
