"""Webhook server and dispatcher for GitHub events."""

from prwatch.webhook.handlers import WebhookDispatcher
from prwatch.webhook.server import run_webhook_server

__all__ = ["WebhookDispatcher", "run_webhook_server"]
