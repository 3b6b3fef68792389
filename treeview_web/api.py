# treeview_web/api.py
from typing import Any, Dict, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS # For Cross-Origin Resource Sharing
from loguru import logger

from treeview_cli.commands_core import (
    CommandStatus,
    new_tree_action,
    add_node_action,
    remove_node_action,
    select_node_action,
    relatives_action,
)
from treeview_cli.config import load_config, setup_logging
from treeview_cli.layout_engine import TreeLayoutEngine

app = Flask(__name__)
CORS(app) # This will enable CORS for all routes

# --- Global state for the API (one tree per process) ---
api_engine: TreeLayoutEngine = TreeLayoutEngine(load_config())
# --- End Global State ---

HTTP_STATUS_FOR = {
    CommandStatus.SUCCESS: 200,
    CommandStatus.ERROR: 400,
    CommandStatus.NOT_FOUND: 404,
    CommandStatus.INVALID_OPERATION: 409,
}


def get_tree_as_dict(engine: TreeLayoutEngine) -> Dict[str, Any]:
    """Snapshot for API responses. JSON object keys are strings, so node ids are stringified."""
    data = engine.to_dict()
    data["nodes"] = {str(node_id): node_data for node_id, node_data in data["nodes"].items()}
    return data


def _failure(status: str, msg: str):
    return jsonify({"status": status, "message": msg}), HTTP_STATUS_FOR.get(status, 400)


# --- API Endpoints ---

@app.route('/tree/new', methods=['POST'])
def api_new_tree():
    global api_engine
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    try:
        config = load_config(
            space_x=data.get('space_x'),
            space_y=data.get('space_y'),
            variant=data.get('variant'),
        )
    except ValueError as e:
        return _failure(CommandStatus.ERROR, f"Invalid configuration: {e}")

    status, engine, msg = new_tree_action(config)
    api_engine = engine
    logger.info("New {} tree created through the API", engine.variant)
    return jsonify({"status": status, "message": msg, "tree": get_tree_as_dict(api_engine)}), 201


@app.route('/tree', methods=['GET'])
def api_get_tree():
    return jsonify({"status": CommandStatus.SUCCESS, "message": "Current tree.", "tree": get_tree_as_dict(api_engine)}), 200


@app.route('/node/add', methods=['POST'])
def api_add_node():
    data: Optional[Dict[str, Any]] = request.get_json(silent=True)
    if not data or data.get('parent_id') is None:
        return _failure(CommandStatus.ERROR, "Missing 'parent_id' in request body")

    status, new_node, msg = add_node_action(api_engine, data['parent_id'])
    if status != CommandStatus.SUCCESS:
        return _failure(status, msg)
    return jsonify({"status": status, "message": msg, "node_id": new_node.id, "tree": get_tree_as_dict(api_engine)}), 201


@app.route('/node/<int:node_id>', methods=['DELETE'])
def api_remove_node(node_id: int):
    status, removed_ids, msg = remove_node_action(api_engine, node_id)
    if status != CommandStatus.SUCCESS:
        return _failure(status, msg)
    return jsonify({"status": status, "message": msg, "removed_ids": removed_ids, "tree": get_tree_as_dict(api_engine)}), 200


@app.route('/node/<int:node_id>/select', methods=['POST'])
def api_select_node(node_id: int):
    status, _, msg = select_node_action(api_engine, node_id)
    if status != CommandStatus.SUCCESS:
        return _failure(status, msg)
    return jsonify({"status": status, "message": msg, "selected_node_id": api_engine.selected_node_id}), 200


@app.route('/node/<int:node_id>/relatives', methods=['GET'])
def api_node_relatives(node_id: int):
    status, relatives, msg = relatives_action(api_engine, node_id)
    if status != CommandStatus.SUCCESS:
        return _failure(status, msg)
    return jsonify({"status": status, "message": msg, "relatives": relatives}), 200


@app.route('/status', methods=['GET'])
def api_status_check():
    """A simple endpoint to check if the API is running."""
    return jsonify({"status": "ok", "message": "TreeView API is running.", "node_count": len(api_engine.nodes)}), 200


if __name__ == '__main__':
    setup_logging(load_config().log_level)
    app.run(debug=True, host='0.0.0.0', port=5001)
