"""Directory blueprint — <API_PREFIX>/clients, /workers

Just enough of a client/worker directory for cards to reference.

Route Map:
  GET    /clients, /workers        — All entries, by name
  POST   /clients, /workers        — Create entry {name, email?, phone?}
  DELETE /clients/<id>, /workers/<id> — Delete entry
"""

from flask import Blueprint, current_app, jsonify, request

from taskboard.errors import ValidationError
from taskboard.extensions import limiter
from taskboard.services import directory_service
from taskboard.services.transaction import unit_of_work

directory_bp = Blueprint("directory", __name__)

_ROUTES = {"clients": "client", "workers": "worker"}


def _kind(collection):
    return _ROUTES[collection]


@directory_bp.route("/<any(clients, workers):collection>")
def api_list_entries(collection):
    entries = directory_service.list_entries(_kind(collection))
    return jsonify([directory_service.entry_dict(e) for e in entries])


@directory_bp.route("/<any(clients, workers):collection>", methods=["POST"])
@limiter.limit(lambda: current_app.config["WRITE_RATE_LIMIT"])
def api_create_entry(collection):
    data = request.get_json(force=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    kind = _kind(collection)
    with unit_of_work(f"{kind}.create"):
        entry = directory_service.create_entry(kind, data)
    return jsonify(directory_service.entry_dict(entry)), 201


@directory_bp.route("/<any(clients, workers):collection>/<entry_id>", methods=["DELETE"])
@limiter.limit(lambda: current_app.config["WRITE_RATE_LIMIT"])
def api_delete_entry(collection, entry_id):
    kind = _kind(collection)
    with unit_of_work(f"{kind}.delete"):
        directory_service.delete_entry(kind, entry_id)
    return jsonify({"success": True})
