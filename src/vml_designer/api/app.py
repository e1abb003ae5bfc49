"""
Control Channel
HTTP surface for inspecting and driving a running designer.
"""

import time
from concurrent.futures import Future
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from vml_designer import __version__
from vml_designer.controls import Control, describe, fire_event, invoke_method, list_controls
from vml_designer.core import DesignerError, get_logger
from vml_designer.dispatch import Dispatcher
from vml_designer.monitoring import metrics_collector

logger = get_logger(__name__)


# Request Models
class SetPropertyRequest(BaseModel):
    property: str
    value: Any = None


class InvokeMethodRequest(BaseModel):
    method: str
    args: list[Any] = Field(default_factory=list)


class FireEventRequest(BaseModel):
    event: str


class DispatchRequest(BaseModel):
    command: str
    args: list[Any] = Field(default_factory=list)


def _jsonable(value: Any) -> Any:
    """Scheduled script runs are reported, not awaited."""
    if isinstance(value, Future):
        return {"scheduled": True}
    return jsonable_encoder(value)


def create_app(runtime: Any) -> FastAPI:
    """
    Build the control channel for a runtime.

    Every endpoint except /health and /metrics requires the X-API-Key
    header. Anything touching the live graph runs on the UI thread.
    """
    app = FastAPI(
        title="VML Designer",
        description="Remote control surface for a running designer",
        version=__version__,
    )
    app.state.runtime = runtime
    app.state.started_at = time.time()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def require_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
        if x_api_key != runtime.settings.api_key:
            logger.warning("api_key_rejected")
            raise HTTPException(status_code=401, detail="Invalid or missing API key")

    def find_control(name: str) -> Control:
        control = runtime.ui.invoke(runtime.dispatcher.find, name)
        if control is None:
            raise HTTPException(status_code=404, detail=f"Control not found: {name}")
        return control

    @app.get("/health")
    def health():
        """Liveness check"""
        return {"status": "healthy", "version": __version__, "timestamp": time.time()}

    @app.get("/metrics")
    def metrics():
        return Response(content=metrics_collector.get_metrics(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/api/status", dependencies=[Depends(require_api_key)])
    def status():
        """Runtime overview"""
        return {
            "status": "running" if runtime.started else "stopped",
            "version": __version__,
            "uptime": time.time() - app.state.started_at,
            "db_path": runtime.settings.db_path,
            "roots": runtime.ui.invoke(lambda: [root.name for root in runtime.graph.roots]),
            "canvas_controls": runtime.ui.invoke(runtime.canvas.names),
            "interpreters": runtime.bridge.interpreters,
            "scripts": [script.name for script in runtime.scripts.list_all()],
            "commands": Dispatcher.commands(),
        }

    @app.get("/api/controls", dependencies=[Depends(require_api_key)])
    def controls():
        """Every named control in the live graph"""
        items = runtime.ui.invoke(lambda: list_controls(runtime.graph.roots))
        return {"controls": items, "count": len(items)}

    @app.get("/api/controls/{name}", dependencies=[Depends(require_api_key)])
    def control_detail(name: str):
        control = find_control(name)
        return runtime.ui.invoke(describe, control)

    @app.post("/api/controls/{name}/set-property", dependencies=[Depends(require_api_key)])
    def set_property(name: str, request: SetPropertyRequest):
        """Set a property the way a script would; persisted to the flat record."""
        find_control(name)
        ok = runtime.dispatch("SetProperty", [name, request.property, request.value])
        if not ok:
            raise HTTPException(
                status_code=400, detail=f"Cannot set {request.property} on {name}"
            )
        value = runtime.dispatch("GetProperty", [name, request.property])
        return {"success": True, "control": name, "property": request.property, "value": value}

    @app.post("/api/controls/{name}/invoke-method", dependencies=[Depends(require_api_key)])
    def invoke(name: str, request: InvokeMethodRequest):
        control = find_control(name)
        try:
            result = runtime.ui.invoke(invoke_method, control, request.method, request.args)
        except DesignerError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"success": True, "result": _jsonable(result)}

    @app.post("/api/controls/{name}/fire-event", dependencies=[Depends(require_api_key)])
    def fire(name: str, request: FireEventRequest):
        control = find_control(name)
        handlers = runtime.ui.invoke(fire_event, control, request.event)
        return {"success": True, "event": request.event, "handlers": handlers}

    @app.post("/api/dispatch", dependencies=[Depends(require_api_key)])
    def dispatch(request: DispatchRequest):
        """Generic command dispatch (built-ins or script names)"""
        result = runtime.dispatch(request.command, request.args)
        return {"command": request.command, "result": _jsonable(result)}

    @app.post("/shell", dependencies=[Depends(require_api_key)])
    async def shell(request: Request):
        """Run the raw request body as a shell command"""
        command = (await request.body()).decode("utf-8", errors="replace").strip()
        if not command:
            raise HTTPException(status_code=400, detail="Empty command")
        result = await run_in_threadpool(runtime.dispatch, "Shell", [command])
        if result is None:
            raise HTTPException(status_code=500, detail="Shell command failed")
        return result

    return app
