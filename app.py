from __future__ import annotations

import math
import os
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from gridlayout import (
    GridState,
    Item,
    apply_patches,
    can_fit_x,
    compute_ghost_move_snap,
    compute_synthetic_slots,
    get_move_changes,
    get_reorder_patch,
    get_resize_changes,
    item_from_json,
    move_request_from_json,
    preview_move_changes,
    provision_row,
    resize_request_from_json,
    should_compute_move_snap,
    state_from_json,
    state_to_json,
    validate_resize_x,
)
from gridlayout_core.config import (
    debug_enabled,
    default_columns,
    default_options,
    max_columns,
    max_rows,
    snap_threshold,
)

app = Flask(__name__)

BAD_INPUT = (KeyError, ValueError, TypeError, OverflowError)


class BadRequest(Exception):
    pass


def _body() -> Dict[str, Any]:
    body = request.get_json(force=True, silent=True)
    return body if isinstance(body, dict) else {}


def _json_to_state(body: Dict[str, Any]) -> GridState:
    s_in = body.get("state")
    if not isinstance(s_in, dict):
        raise BadRequest("state required")
    state = state_from_json(s_in, defaults=default_options(), default_columns=default_columns())
    if state.columns > max_columns() or state.rows > max_rows():
        raise BadRequest(f"grid too large: {state.columns}x{state.rows}")
    return state


def _finite(body: Dict[str, Any], key: str, default: Any = None) -> float:
    value = float(body[key] if default is None else body.get(key, default))
    if not math.isfinite(value):
        raise BadRequest(f"{key} must be a finite number")
    return value


def _item_for(state: GridState, item_id: Any) -> Item:
    item = state.get(str(item_id))
    if item is None:
        raise BadRequest(f"unknown item: {item_id}")
    return item


def _error(msg: str, status: int = 400) -> Tuple[Any, int]:
    app.logger.warning("rejected request to %s: %s", request.path, msg)
    return jsonify({"ok": False, "error": msg}), status


def _state_payload(state: GridState, highlight: Optional[str] = None) -> Dict[str, Any]:
    return {"state": state_to_json(state), "grid": state.pretty(highlight=highlight).split("\n")}


@app.get("/")
def index() -> Any:
    return jsonify({
        "ok": True,
        "name": "gridlayout",
        "endpoints": sorted(str(r) for r in app.url_map.iter_rules() if str(r).startswith("/api/")),
    })


@app.post("/api/state")
def api_state() -> Any:
    try:
        state = _json_to_state(_body())
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad state: {e}")
    return jsonify({"ok": True, **_state_payload(state)})


@app.post("/api/move")
def api_move() -> Any:
    body = _body()
    try:
        state = _json_to_state(body)
        data = move_request_from_json(body.get("move") or {})
        item = _item_for(state, data.id)
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad move: {e}")
    patches = get_move_changes(data, state, item)
    next_state = apply_patches(state, patches)
    out: Dict[str, Any] = {"ok": True, "accepted": bool(patches), "patches": patches}
    if body.get("reorder") and patches:
        out["order"] = get_reorder_patch(next_state)
    out.update(_state_payload(next_state, highlight=item.id))
    return jsonify(out)


@app.post("/api/preview")
def api_preview() -> Any:
    body = _body()
    try:
        state = _json_to_state(body)
        data = move_request_from_json(body.get("move") or {})
        item = _item_for(state, data.id)
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad move: {e}")
    return jsonify({"ok": True, "preview": preview_move_changes(data, state, item)})


@app.post("/api/resize/validate")
def api_resize_validate() -> Any:
    body = _body()
    try:
        state = _json_to_state(body)
        item = _item_for(state, body.get("id"))
        validated = validate_resize_x(
            item,
            side=str(body.get("side", "east")),
            direction=str(body.get("direction", body.get("side", "east"))),
            new_colspan=int(body["colspan"]),
            positions=state.positions,
            max_columns=state.columns,
            min_span=int(body.get("minSpan", state.options.min_span)),
        )
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad resize: {e}")
    return jsonify({"ok": True, "resize": validated})


@app.post("/api/resize")
def api_resize() -> Any:
    body = _body()
    try:
        state = _json_to_state(body)
        data = resize_request_from_json(body.get("resize") or {})
        item = _item_for(state, data.id)
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad resize: {e}")
    patches = get_resize_changes(data, state, item)
    return jsonify({"ok": True, "patches": patches, **_state_payload(apply_patches(state, patches))})


@app.post("/api/reorder")
def api_reorder() -> Any:
    body = _body()
    try:
        state = _json_to_state(body)
        new_item = item_from_json(body["item"]) if body.get("item") else None
        deleted = _item_for(state, body["deleted"]) if body.get("deleted") else None
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad reorder: {e}")
    return jsonify({"ok": True, "patches": get_reorder_patch(state, item=new_item, deleted=deleted)})


@app.post("/api/provision")
def api_provision() -> Any:
    body = _body()
    defaults = default_options()
    try:
        row = int(body.get("row", 1) or 1)
    except BAD_INPUT as e:
        return _error(f"bad row: {e}")
    try:
        columns = _finite(body, "columns", default_columns())
        if not 1 <= columns <= max_columns():
            raise BadRequest(f"columns must be between 1 and {max_columns()}")
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad columns: {e}")
    items = provision_row(
        columns,
        min_colspan=body.get("minColspan", defaults.min_span),
        default_colspan=body.get("defaultColspan", defaults.default_span),
        row=row,
    )
    return jsonify({"ok": True, "items": items})


@app.post("/api/fit")
def api_fit() -> Any:
    body = _body()
    try:
        state = _json_to_state(body)
        item = _item_for(state, body.get("id"))
        side = str(body.get("side", "east"))
        if side not in ("east", "west"):
            raise BadRequest(f"bad side: {side}")
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad state: {e}")
    return jsonify({"ok": True, "fit": can_fit_x(item, side, state)})


@app.post("/api/slots")
def api_slots() -> Any:
    try:
        state = _json_to_state(_body())
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad state: {e}")
    return jsonify({"ok": True, "slots": compute_synthetic_slots(state)})


@app.post("/api/snap")
def api_snap() -> Any:
    body = _body()
    try:
        state = _json_to_state(body)
        item = _item_for(state, body.get("id"))
        geometry = dict(
            left=_finite(body, "left"),
            top=_finite(body, "top"),
            state=state,
            item=item,
            columns=int(body.get("columns", state.columns)),
            rows=int(body.get("rows", state.rows)),
            step_x=_finite(body, "stepX"),
            step_y=_finite(body, "stepY"),
            threshold=_finite(body, "threshold", snap_threshold()),
        )
        if geometry["step_x"] <= 0 or geometry["step_y"] <= 0:
            raise BadRequest("stepX and stepY must be positive")
    except BadRequest as e:
        return _error(str(e))
    except BAD_INPUT as e:
        return _error(f"bad snap: {e}")
    check = should_compute_move_snap(prev_memo=body.get("memo"), **geometry)
    snap = compute_ghost_move_snap(**geometry) if check["compute"] else None
    return jsonify({"ok": True, "memo": check["memo"], "changed": check["compute"], "snap": snap})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="127.0.0.1", port=port, debug=debug_enabled())
