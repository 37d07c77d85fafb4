"""Flask server speaking the Battlesnake HTTP API.

Run locally:
  pip install -e .
  PORT=8000 snakemind
"""
from __future__ import annotations

import logging
import os
import time
from typing import Optional

from flask import Flask, jsonify, request

from snakemind.api import PayloadError, info, parse_game_state
from snakemind.config import EngineConfig
from snakemind.orchestrator import decide

logger = logging.getLogger(__name__)


def create_app(config: Optional[EngineConfig] = None) -> Flask:
    app = Flask(__name__)
    engine_config = config or EngineConfig.from_env()

    def game_state():
        received_at = time.perf_counter()
        return parse_game_state(request.get_json(force=True, silent=True), received_at)

    @app.errorhandler(PayloadError)
    def bad_payload(exc):
        logger.warning("rejected request to %s: %s", request.path, exc)
        return jsonify({"error": str(exc)}), 400

    @app.get("/")
    def index():
        return jsonify(info())

    @app.get("/ping")
    def ping():
        return jsonify({"ok": True})

    @app.post("/start")
    def start():
        gs = game_state()
        logger.info("START game=%s you=%s %dx%d rules=%s", gs.game_id, gs.you,
                    gs.board.width, gs.board.height, gs.board.rules.name)
        return ("", 200)

    @app.post("/move")
    def move():
        gs = game_state()
        decision = decide(gs, engine_config)
        return jsonify({"move": decision.move.value, "shout": decision.shout})

    @app.post("/end")
    def end():
        gs = game_state()
        me = gs.board.get(gs.you)
        logger.info("END game=%s turn=%d alive=%s", gs.game_id, gs.board.turn,
                    me is not None and me.alive)
        return ("", 200)

    return app


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("SNAKEMIND_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.environ.get("PORT", "8000"))
    host = os.environ.get("HOST", "0.0.0.0")
    create_app().run(host=host, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
