"""API routes for namedctl."""

from __future__ import annotations

import logging
import os

from flask import Blueprint, current_app, jsonify, request

from .errors import ParseError, RndcError
from .parser.extractor import parse_showzone
from .patch import ZonePatch, add_zone, delete_zone, modify_zone

log = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api/v1")

ZONE_ACTIONS = ("reload", "freeze", "thaw", "notify", "retransfer")

# Keys of POST /zones that are not patch fields
_CREATE_KEYS = ("zoneName", "zone_name", "zoneType", "zone_type", "file")


def _executor():
    return current_app.config["RNDC_EXECUTOR"]


def _locks():
    return current_app.config["ZONE_LOCKS"]


def _error(message: str, details=None, status: int = 500):
    return jsonify({"error": message, "details": details}), status


def _rndc_error(exc: RndcError):
    if exc.not_found:
        return _error("Zone not found", exc.output, 404)
    log.error("%s", exc)
    return _error(f"rndc {exc.command} failed", exc.output, 500)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    return data


@api_bp.route("/health")
def health():
    return jsonify({"status": "healthy"})


@api_bp.route("/ready")
def ready():
    """Readiness: the zone directory exists and rndc answers."""
    zone_dir = current_app.config["NAMEDCTL"].bind_zone_dir
    checks = []
    is_ready = True

    if os.path.isdir(zone_dir):
        checks.append(f"zone_dir_accessible: {zone_dir}")
    else:
        is_ready = False
        checks.append(f"zone_dir_missing: {zone_dir}")

    try:
        _executor().status()
        checks.append("rndc_available: true")
    except RndcError as e:
        log.warning("rndc not ready: %s", e)
        is_ready = False
        checks.append(f"rndc_error: {e.output}")

    return jsonify({"ready": is_ready, "checks": checks}), 200 if is_ready else 503


@api_bp.route("/zones")
def list_zones():
    """Names of the ``*.zone`` files in the zone directory."""
    zone_dir = current_app.config["NAMEDCTL"].bind_zone_dir
    try:
        names = os.listdir(zone_dir)
    except OSError as e:
        log.error("Cannot read zone directory %s: %s", zone_dir, e)
        return _error("Cannot read zone directory", str(e))
    zones = sorted(n[: -len(".zone")] for n in names if n.endswith(".zone"))
    return jsonify({"zones": zones, "count": len(zones)})


@api_bp.route("/server/status")
def server_status():
    try:
        output = _executor().status()
    except RndcError as e:
        return _rndc_error(e)
    return jsonify({"status": "ok", "output": output})


@api_bp.route("/zones/<name>")
def get_zone(name):
    try:
        config = parse_showzone(_executor().showzone(name))
    except RndcError as e:
        return _rndc_error(e)
    except ParseError as e:
        log.error("Cannot parse configuration of zone %s: %s", name, e)
        return _error("Cannot parse zone configuration", str(e))
    return jsonify(config.to_dict())


@api_bp.route("/zones/<name>/status")
def zone_status(name):
    try:
        output = _executor().zonestatus(name)
    except RndcError as e:
        return _rndc_error(e)
    return jsonify({"zone": name, "output": output})


@api_bp.route("/zones", methods=["POST"])
def create_zone():
    """Create a zone with rndc addzone.

    Body: ``zoneName``, ``zoneType``, optional ``file`` and any of the
    PATCH fields. Primary zones without ``file`` get one in the zone
    directory.
    """
    try:
        data = _json_body()
        zone = data.get("zoneName") or data.get("zone_name")
        zone_type = data.get("zoneType") or data.get("zone_type")
        if not (zone and zone_type and isinstance(zone, str) and isinstance(zone_type, str)):
            raise ValueError("zoneName and zoneType are required strings")
        file = data.get("file")
        if file is not None and not isinstance(file, str):
            raise ValueError("file must be a string")
        settings = ZonePatch.from_json(
            {k: v for k, v in data.items() if k not in _CREATE_KEYS}, allow_empty=True
        )
    except (ValueError, ParseError) as e:
        return _error("Invalid request", str(e), 400)

    if file is None and zone_type in ("primary", "master"):
        file = f"{current_app.config['NAMEDCTL'].bind_zone_dir}/{zone.rstrip('.')}.zone"

    try:
        config = add_zone(_executor(), _locks(), zone, zone_type, settings, file=file)
    except ValueError as e:
        return _error("Invalid request", str(e), 400)
    except RndcError as e:
        return _rndc_error(e)
    return jsonify(config.to_dict()), 201


@api_bp.route("/zones/<name>", methods=["PATCH"])
def patch_zone(name):
    try:
        patch = ZonePatch.from_json(_json_body())
    except (ValueError, ParseError) as e:
        return _error("Invalid request", str(e), 400)

    try:
        config = modify_zone(_executor(), _locks(), name, patch)
    except RndcError as e:
        return _rndc_error(e)
    except ParseError as e:
        log.error("Cannot parse configuration of zone %s: %s", name, e)
        return _error("Cannot parse zone configuration", str(e))
    return jsonify(config.to_dict())


@api_bp.route("/zones/<name>", methods=["DELETE"])
def remove_zone(name):
    clean = request.args.get("clean", "").lower() in ("1", "true", "yes")
    try:
        delete_zone(_executor(), _locks(), name, clean=clean)
    except RndcError as e:
        return _rndc_error(e)
    return jsonify({"status": "deleted", "zone": name})


@api_bp.route("/zones/<name>/<action>", methods=["POST"])
def zone_action(name, action):
    if action not in ZONE_ACTIONS:
        return _error("Unknown action", f"expected one of: {', '.join(ZONE_ACTIONS)}", 400)
    try:
        output = getattr(_executor(), action)(name)
    except RndcError as e:
        return _rndc_error(e)
    log.info("rndc %s %s", action, name)
    return jsonify({"status": "ok", "zone": name, "action": action, "output": output})
