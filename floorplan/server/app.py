"""FastAPI application exposing the layout to other clients."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..config import EditorSettings
from ..controller import LayoutController
from ..models import InvalidItemSpec, Machine

logger = logging.getLogger(__name__)


def create_controller(settings: Optional[EditorSettings] = None) -> LayoutController:
    return LayoutController(settings=settings or EditorSettings())


def create_app(controller: Optional[LayoutController] = None) -> FastAPI:
    controller = controller or create_controller()
    app = FastAPI(title="Cell Layout Server")
    app.state.controller = controller
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/layout")
    def get_layout() -> Dict[str, Any]:
        return controller.snapshot_dict()

    @app.put("/api/layout")
    def put_layout(payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            snapshot = controller.load_snapshot_dict(payload)
        except InvalidItemSpec as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"ok": True, "count": len(snapshot.items)}

    @app.get("/api/catalog")
    def get_catalog() -> Dict[str, Any]:
        return {"machines": controller.catalog_entries()}

    @app.post("/api/layout/machines")
    def post_machine(payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            machine = Machine.from_dict(payload)
        except (KeyError, TypeError) as exc:
            raise HTTPException(status_code=400, detail="id is required") from exc
        result = controller.add_backing_entity(machine)
        if result.reason == "duplicate":
            raise HTTPException(status_code=409, detail=f"{machine.id} is already on the layout")
        if not result.placed:
            raise HTTPException(status_code=400, detail=f"{machine.id} cannot be placed")
        return {"ok": True, "uid": result.uid}

    @app.post("/api/layout/labels")
    def post_label(payload: Dict[str, Any]) -> Dict[str, Any]:
        result = controller.add_label(str(payload.get("text", "")), kind=str(payload.get("kind", "label")))
        if not result.placed:
            raise HTTPException(status_code=400, detail="Unsupported label kind")
        return {"ok": True, "uid": result.uid}

    @app.delete("/api/layout/items/{uid}")
    def delete_item(uid: str) -> Dict[str, Any]:
        return {"ok": True, "removed": controller.remove_item(uid)}

    @app.post("/api/viewport/zoom-in")
    def viewport_zoom_in() -> Dict[str, Any]:
        return {"scale": controller.zoom_in()}

    @app.post("/api/viewport/zoom-out")
    def viewport_zoom_out() -> Dict[str, Any]:
        return {"scale": controller.zoom_out()}

    @app.post("/api/viewport/reset")
    def viewport_reset() -> Dict[str, Any]:
        return controller.reset_view().to_dict()

    return app


app = create_app()


__all__ = ["app", "create_app", "create_controller"]
