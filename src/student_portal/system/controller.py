from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import utc_now
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        connectivity = container.connectivity
        body = {
            "status": "Server is running",
            "timestamp": utc_now().isoformat(),
            "database": connectivity.describe(),
        }
        if not connectivity.online:
            counts = connectivity.fallback.counts()
            body["users"] = counts["users"]
            body["activeOTPs"] = counts["pending"]
            body["activeResetTokens"] = counts["reset_tokens"]
        return jsonify(body)
