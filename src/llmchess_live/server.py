"""
Minimal Flask API over the shared game state.

Endpoints:
- GET  /api/game-state      -> current snapshot (all viewers poll this)
- POST /api/start-watching  -> viewer count + 1
- POST /api/stop-watching   -> viewer count - 1 (never below zero)

The orchestrator is built once in main() and runs on its own thread; request
handlers only read snapshots and bump the viewer count.
"""
from __future__ import annotations

import argparse
import logging

from flask import Flask, jsonify, request

from .config import SETTINGS
from .state import GameStateStore
from .supervisor import build_orchestrator

log = logging.getLogger("server")


def create_app(store: GameStateStore) -> Flask:
    app = Flask(__name__)

    @app.route("/api/game-state", methods=["GET"])
    def game_state():
        try:
            return jsonify(store.snapshot().to_dict())
        except Exception:
            log.exception("Error getting game state")
            return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/start-watching", methods=["POST"])
    def start_watching():
        try:
            store.add_viewer()
        except Exception:
            log.exception("Error adding viewer")
            return jsonify({"error": "Internal server error"}), 500
        return jsonify({"success": True})

    @app.route("/api/stop-watching", methods=["POST"])
    def stop_watching():
        try:
            store.remove_viewer()
        except Exception:
            log.exception("Error removing viewer")
            return jsonify({"error": "Internal server error"}), 500
        return jsonify({"success": True})

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        # Prevent caching so every poll sees the freshest state
        response.headers["Cache-Control"] = "no-store, max-age=0"
        return response

    return app


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Serve the live LLM chess arena.")
    ap.add_argument("--host", default=SETTINGS.host)
    ap.add_argument("--port", type=int, default=SETTINGS.port)
    ap.add_argument("--log-level", default="INFO", help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(asctime)s %(levelname)s %(message)s")

    orchestrator = build_orchestrator(SETTINGS)
    orchestrator.start()
    app = create_app(orchestrator.store)
    try:
        # no reloader: it would start a second orchestrator in the child process
        app.run(host=args.host, port=args.port, threaded=True, use_reloader=False)
    finally:
        orchestrator.stop(timeout=5)


if __name__ == "__main__":
    main()
