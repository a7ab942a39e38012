"""Webhook HTTP server for GitHub events.

Serves a health check and the webhook path. Deliveries are verified against
the webhook secret (X-Hub-Signature-256) when one is configured, answered at
once, and processed in a background thread.
"""

import hashlib
import hmac
import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs

from reltagger.config import AppConfig
from reltagger.release import ReleaseError
from reltagger.webhook.handlers import handle_github_event

LOG = logging.getLogger("reltagger.webhook")


def verify_signature(secret: str, body: bytes, signature_header: str | None) -> bool:
    """Check X-Hub-Signature-256 (sha256=<hex HMAC of body>)."""
    if not signature_header or not signature_header.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    received = signature_header.removeprefix("sha256=")
    return hmac.compare_digest(expected, received)


def _process_event(config: AppConfig, event: str, payload: dict) -> None:
    """Run the handler; log failures (runs in a background thread)."""
    try:
        result = handle_github_event(config, event, payload)
    except ReleaseError as e:
        LOG.error("Release failed at step %s: %s", e.step, e)
        return
    except Exception as e:
        LOG.exception("Webhook processing error for %s: %s", event, e)
        return
    if result is not None and result.triggered:
        LOG.info("Released %s (tag pushed: %s)", result.version, result.pushed)


class WebhookHandler(BaseHTTPRequestHandler):
    """Handle GET /health and POST <github.webhook_path>."""

    config: AppConfig

    def do_GET(self) -> None:
        if self.path == "/health" or self.path == "/":
            self._send_json(200, {"status": "ok", "service": "reltagger"})
            return
        self.send_response(404)
        self.end_headers()

    def do_POST(self) -> None:
        if self.path == self.config.github.webhook_path:
            self._handle_github_webhook()
            return
        self.send_response(404)
        self.end_headers()

    def _send_json(self, status: int, data: dict) -> None:
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())

    def _parse_webhook_body(self, body: bytes) -> dict:
        """Parse webhook body as JSON.

        Supports raw JSON and application/x-www-form-urlencoded (payload=...).
        """
        if not body:
            return {}
        content_type = self.headers.get("Content-Type", "")
        if "application/x-www-form-urlencoded" in content_type:
            parsed = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
            raw = (parsed.get("payload") or [None])[0]
            if raw is None:
                return {}
            return json.loads(raw)
        return json.loads(body.decode())

    def _handle_github_webhook(self) -> None:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length) if length else b""
        secret = self.config.webhook_secret_resolved
        if secret and not verify_signature(secret, body, self.headers.get("X-Hub-Signature-256")):
            LOG.warning("Rejected webhook with missing or invalid signature")
            self._send_json(401, {"error": "invalid signature"})
            return
        try:
            payload = self._parse_webhook_body(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            payload = None
        if not isinstance(payload, dict):
            LOG.warning("Invalid webhook JSON (%d bytes)", len(body))
            self._send_json(400, {"error": "invalid JSON"})
            return
        event = self.headers.get("X-GitHub-Event", "")
        LOG.info("Webhook event: %s (action: %s)", event, payload.get("action"))
        threading.Thread(
            target=_process_event,
            args=(self.config, event, payload),
            name=f"reltagger-{event or 'event'}",
            daemon=True,
        ).start()
        self._send_json(200, {"received": True})

    def log_message(self, format: str, *args: Any) -> None:
        LOG.debug(format, *args)


def make_server(config: AppConfig) -> ThreadingHTTPServer:
    """Create the HTTP server bound to config.webhook.host:port."""
    handler = type("BoundWebhookHandler", (WebhookHandler,), {"config": config})
    return ThreadingHTTPServer((config.webhook.host, config.webhook.port), handler)


def run_webhook_server(config: AppConfig) -> None:
    """Run HTTP server for webhooks and health check."""
    server = make_server(config)
    LOG.info("Webhook server listening on %s:%s", config.webhook.host, config.webhook.port)
    server.serve_forever()
