"""Webhook HTTP server for GitHub events.

Serves GET /health and POST on the configured webhook path. Bodies are
either form-encoded with a `payload` field or raw JSON. Every webhook call
is answered 200 unless the signature check fails.
"""

import hashlib
import hmac
import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs

from prwatch.config import AppConfig
from prwatch.webhook.handlers import WebhookDispatcher

LOG = logging.getLogger("prwatch.webhook")


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """Check X-Hub-Signature-256 (sha256=<hex hmac>) against the body."""
    if not signature or not signature.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature[len("sha256=") :])


class WebhookHandler(BaseHTTPRequestHandler):
    """Handle GET /health and POST {webhook.path}."""

    config: AppConfig
    dispatcher: WebhookDispatcher

    def do_GET(self) -> None:
        if self.path == "/health" or self.path == "/":
            self._send_json(200, {"status": "ok", "service": "prwatch"})
            return
        self.send_response(404)
        self.end_headers()

    def do_POST(self) -> None:
        if self.path == self.config.webhook.path:
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
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            LOG.warning("Invalid Content-Length %r; treating body as empty", self.headers.get("Content-Length"))
            length = 0
        body = self.rfile.read(length) if length else b""
        secret = self.config.webhook_secret_resolved
        if secret and not verify_signature(secret, body, self.headers.get("X-Hub-Signature-256")):
            LOG.warning("Webhook signature mismatch; request rejected")
            self._send_json(403, {"received": False})
            return
        event = self.headers.get("X-GitHub-Event", "")
        try:
            payload = self._parse_webhook_body(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            LOG.warning("Invalid webhook JSON for event %s: %s", event, body.decode("utf-8", errors="replace"))
        else:
            if isinstance(payload, dict):
                LOG.info("Webhook event: %s (payload keys: %s)", event, list(payload.keys()))
                self.dispatcher.dispatch(event, payload)
            else:
                LOG.warning("Webhook payload for event %s is not a JSON object; ignoring", event)
        self._send_json(200, {"received": True})

    def log_message(self, format: str, *args: Any) -> None:
        LOG.debug(format, *args)


def make_webhook_server(config: AppConfig, dispatcher: WebhookDispatcher) -> ThreadingHTTPServer:
    """Bind the server; each request is handled on its own thread."""
    handler = type("BoundWebhookHandler", (WebhookHandler,), {"config": config, "dispatcher": dispatcher})
    return ThreadingHTTPServer((config.webhook.host, config.webhook.port), handler)


def run_webhook_server(config: AppConfig, dispatcher: WebhookDispatcher) -> None:
    """Run HTTP server for webhooks and health check."""
    server = make_webhook_server(config, dispatcher)
    LOG.info("Webhook server listening on %s:%s%s", config.webhook.host, config.webhook.port, config.webhook.path)
    server.serve_forever()
