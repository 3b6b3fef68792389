# treeview_web/websocket_server.py
import asyncio
import json
from typing import Any, Dict, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from loguru import logger

from treeview_cli.commands_core import CommandStatus, execute_command_action
from treeview_cli.config import load_config, setup_logging
from treeview_cli.layout_engine import TreeLayoutEngine

app = FastAPI()

ALLOWED_COMMANDS = {"add", "remove", "select", "reset", "relatives"}

engine = TreeLayoutEngine(load_config())
connections: Set[WebSocket] = set()
_pending_broadcasts: Set[asyncio.Task] = set() # Keeps scheduled broadcasts referenced until done


def tree_message(tree_engine: TreeLayoutEngine) -> Dict[str, Any]:
    data = tree_engine.to_dict()
    data["nodes"] = {str(node_id): node_data for node_id, node_data in data["nodes"].items()}
    return {"type": "tree", "tree": data}


async def broadcast(message: Dict[str, Any]):
    """Sends a message to every connected client, dropping clients that have gone away."""
    for websocket in list(connections):
        try:
            await websocket.send_json(message)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.info("Dropping client {} after failed send: {}", websocket.client, e)
            connections.discard(websocket)


def _on_tree_changed(tree_engine: TreeLayoutEngine):
    """Engine listener. Runs synchronously inside a command, so the send is scheduled as a task."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return # Mutation outside the event loop (e.g. at import); nobody to notify
    task = loop.create_task(broadcast(tree_message(tree_engine)))
    _pending_broadcasts.add(task)
    task.add_done_callback(_pending_broadcasts.discard)


engine.subscribe(_on_tree_changed)


async def handle_client_message(websocket: WebSocket, data: Any):
    if not isinstance(data, dict) or not isinstance(data.get("command"), str):
        await websocket.send_json({"type": "error", "status": CommandStatus.ERROR, "message": "Expected {\"command\": ..., \"args\": [...]}"})
        return

    command_name = data["command"].lower()
    args = data.get("args") or []
    if command_name not in ALLOWED_COMMANDS or not isinstance(args, list):
        await websocket.send_json({"type": "error", "status": CommandStatus.ERROR, "message": f"Command '{command_name}' is not recognized or allowed."})
        return

    status, result, msg = execute_command_action(engine, command_name, args)
    if status != CommandStatus.SUCCESS:
        await websocket.send_json({"type": "error", "status": status, "message": msg})
    elif command_name == "relatives":
        # Read-only query: answer the sender, nothing changed
        await websocket.send_json({"type": "relatives", "node_id": args[0], "relatives": result})


@app.get("/tree")
async def get_tree():
    return tree_message(engine)["tree"]


@app.get("/status")
async def status_check():
    return {"status": "ok", "message": "TreeView WebSocket server is running.", "clients": len(connections)}


@app.websocket("/ws")
async def websocket_tree_endpoint(websocket: WebSocket):
    await websocket.accept()
    connections.add(websocket)
    logger.info("WebSocket connection accepted from: {}", websocket.client)
    try:
        await websocket.send_json(tree_message(engine))
        while True:
            text = await websocket.receive_text()
            try:
                data = json.loads(text)
            except ValueError:
                await websocket.send_json({"type": "error", "status": CommandStatus.ERROR, "message": "Messages must be JSON."})
                continue
            await handle_client_message(websocket, data)
    except WebSocketDisconnect:
        logger.info("Client {} disconnected.", websocket.client)
    finally:
        connections.discard(websocket)


if __name__ == "__main__":
    import uvicorn
    setup_logging(load_config().log_level)
    uvicorn.run(
        "treeview_web.websocket_server:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
