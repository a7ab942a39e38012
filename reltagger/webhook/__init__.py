"""Webhook server and handlers for GitHub events."""

from reltagger.webhook.handlers import handle_github_event
from reltagger.webhook.server import run_webhook_server

__all__ = ["handle_github_event", "run_webhook_server"]
