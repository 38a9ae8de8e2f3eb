from __future__ import annotations
import json
from typing import Any, Awaitable, Callable
from urllib.parse import parse_qs
from fastapi import BackgroundTasks, FastAPI, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from pydantic import BaseModel, Field
from conduit.config import Settings
from conduit.core.errors import ConfigurationError, DeliveryError, ResolutionError
from conduit.core.messaging import Messaging
from conduit.channels.slack.channel import SlackChannel
from conduit.persistence.db import make_engine, make_session_factory
from conduit.observability.logging import configure_logging, get_logger, tenant_context

log = get_logger("app")

VERSION = "0.1.0"

class SendRequest(BaseModel):
    channel: str = Field(description="Channel name, e.g. slack")
    conversation_id: str
    payload: dict[str, Any]

def create_app(settings: Settings, messaging: Messaging | None = None) -> FastAPI:
    configure_logging(settings.log_level, settings.json_logs)
    app = FastAPI(title="Conduit", version=VERSION)

    if messaging is None:
        engine = make_engine(settings)
        messaging = Messaging(settings, engine, make_session_factory(engine))
    app.state.messaging = messaging

    @app.on_event("startup")
    async def _startup():
        await messaging.start()
        log.info("conduit_started", host=settings.host, port=settings.port)

    @app.on_event("shutdown")
    async def _shutdown():
        await messaging.stop()

    def _tenant(x_api_key: str | None) -> str:
        tenant_id = messaging.tenant_for_key(x_api_key)
        if tenant_id is None:
            raise HTTPException(status_code=401, detail="unauthorized")
        return tenant_id

    # health/metrics
    @app.get(settings.health_path)
    async def healthz():
        return {"ok": True, "service": "conduit", "version": VERSION}

    @app.get(settings.metrics_path)
    async def metrics_endpoint():
        return PlainTextResponse(generate_latest().decode("utf-8"), media_type=CONTENT_TYPE_LATEST)

    # outbound
    @app.post("/api/send")
    async def send(req: SendRequest, x_api_key: str | None = Header(default=None)):
        tenant_id = _tenant(x_api_key)
        try:
            await messaging.send(tenant_id, req.channel, req.conversation_id, req.payload)
        except ResolutionError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ConfigurationError as e:
            raise HTTPException(status_code=503, detail=str(e))
        except DeliveryError as e:
            log.warning("send_failed", tenant_id=tenant_id, channel=req.channel, error=str(e))
            raise HTTPException(status_code=502, detail=str(e))
        return {"ok": True}

    @app.get("/api/conversations/{conversation_id}/messages")
    async def conversation_messages(conversation_id: str, limit: int = 50, x_api_key: str | None = Header(default=None)):
        tenant_id = _tenant(x_api_key)
        msgs = await messaging.list_messages(tenant_id, conversation_id, limit=limit)
        return {"messages": [m.model_dump(mode="json") for m in msgs]}

    # inbound (slack)
    async def _slack(tenant_id: str, request: Request) -> tuple[SlackChannel, str]:
        try:
            channel = await messaging.channel(tenant_id, "slack")
        except ResolutionError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ConfigurationError as e:
            # unauthenticated caller; keep the missing field out of the response
            log.warning("slack_channel_unavailable", tenant_id=tenant_id, error=str(e))
            raise HTTPException(status_code=503, detail="slack channel unavailable")
        try:
            body = (await request.body()).decode("utf-8")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="request body is not valid UTF-8")
        if not channel.verify(body, request.headers):
            raise HTTPException(status_code=401, detail="invalid slack signature")
        return channel, body

    @app.post("/webhooks/{tenant_id}/slack/events")
    async def slack_events(tenant_id: str, request: Request, background_tasks: BackgroundTasks):
        channel, body = await _slack(tenant_id, request)
        data = _parse_json(body)
        if data.get("type") == "url_verification":
            return {"challenge": data.get("challenge", "")}
        # slack wants an answer within 3s
        background_tasks.add_task(_dispatch, tenant_id, channel.handle_event, data)
        return {"ok": True}

    @app.post("/webhooks/{tenant_id}/slack/interactive")
    async def slack_interactive(tenant_id: str, request: Request, background_tasks: BackgroundTasks):
        channel, body = await _slack(tenant_id, request)
        form = parse_qs(body)
        if "payload" not in form:
            raise HTTPException(status_code=400, detail="missing payload field")
        background_tasks.add_task(_dispatch, tenant_id, channel.handle_interactive, _parse_json(form["payload"][0]))
        return {"ok": True}

    return app

def _parse_json(raw: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"invalid JSON: {e}")
    if not isinstance(value, dict):
        raise HTTPException(status_code=400, detail="invalid JSON payload")
    return value

async def _dispatch(tenant_id: str, listener: Callable[[dict[str, Any]], Awaitable[None]], data: dict[str, Any]) -> None:
    with tenant_context(tenant_id, "slack"):
        try:
            await listener(data)
        except Exception:
            # no caller left to propagate to
            log.exception("inbound_dispatch_failed")
