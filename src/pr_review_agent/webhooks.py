"""GitHub webhook ingress and event routing."""

import hashlib
import hmac
import json
from collections.abc import Callable

import logfire
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from pr_review_agent.agent import ReviewAgent, get_agent_provider
from pr_review_agent.config import Settings, get_settings
from pr_review_agent.handlers import (
    handle_issue_comment,
    handle_new_pull_request,
    handle_review_comment,
)
from pr_review_agent.models import IssueCommentEvent, PullRequestEvent, ReviewCommentEvent
from pr_review_agent.triggers import is_bot_comment

router = APIRouter()

PULL_REQUEST_ACTIONS = frozenset({"opened", "synchronize"})


def verify_signature(payload: bytes, signature: str, secret: str) -> bool:
    """Verify the GitHub webhook signature."""
    if not signature.startswith("sha256="):
        prefix = signature[:10] if signature else "empty"
        logfire.warn("Invalid signature format", signature_prefix=prefix)
        return False

    expected = hmac.new(
        secret.encode("utf-8"),
        payload,
        hashlib.sha256,
    ).hexdigest()

    return hmac.compare_digest(f"sha256={expected}", signature)


def _comment_body(data: dict) -> str | None:
    comment = data.get("comment")
    if not isinstance(comment, dict):
        return None
    body = comment.get("body")
    return body if isinstance(body, str) else None


def _is_pull_request_issue(data: dict) -> bool:
    issue = data.get("issue")
    return isinstance(issue, dict) and issue.get("pull_request") is not None


async def dispatch_event(
    event: str,
    data: dict,
    agent: ReviewAgent,
    bot_name: str,
) -> bool | None:
    """Route a webhook payload to at most one handler.

    Returns the handler's result, or None when the event is ignored.
    Comments carrying the bot marker are dropped here, before any handler runs.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Webhook payload must be a JSON object, got {type(data).__name__}")

    action = data.get("action")

    if event == "pull_request":
        if action in PULL_REQUEST_ACTIONS:
            payload = PullRequestEvent.model_validate(data)
            return await handle_new_pull_request(payload, agent)

    elif event in ("issue_comment", "pull_request_review_comment"):
        if action == "created":
            if is_bot_comment(_comment_body(data)):
                logfire.info(f"[{event}] skipped (own comment)")
                return None

            if event == "pull_request_review_comment":
                payload = ReviewCommentEvent.model_validate(data)
                return await handle_review_comment(payload, agent, bot_name)

            if _is_pull_request_issue(data):
                payload = IssueCommentEvent.model_validate(data)
                return await handle_issue_comment(payload, agent, bot_name)

            logfire.info(f"[{event}] skipped (comment on a plain issue)")
            return None

    else:
        logfire.info(f"[{event}] Unhandled event type", event=event)
        return None

    logfire.info(f"[{event}] skipped (action={action})", event=event, action=action)
    return None


@router.post("/webhook")
async def handle_webhook(
    request: Request,
    x_github_event: str = Header(None),
    x_hub_signature_256: str = Header(None),
    agent_provider: Callable[[], ReviewAgent] = Depends(get_agent_provider),
    settings: Settings = Depends(get_settings),
):
    """Handle incoming GitHub webhooks."""
    if not x_github_event:
        logfire.warn("[webhook] Missing X-GitHub-Event header")
        return JSONResponse(status_code=400, content={"error": "Missing X-GitHub-Event header"})

    try:
        payload = await request.body()

        if settings.github_webhook_secret and not verify_signature(
            payload, x_hub_signature_256 or "", settings.github_webhook_secret
        ):
            logfire.error(f"[{x_github_event}] Signature verification failed")
            return JSONResponse(status_code=401, content={"error": "Invalid signature"})

        data = json.loads(payload)

        repo = "unknown"
        if isinstance(data, dict) and isinstance(data.get("repository"), dict):
            repo = data["repository"].get("full_name", "unknown")
        logfire.info(f"[{x_github_event}] Received event for {repo}", event=x_github_event)

        # Agent is resolved inside the error boundary
        agent = agent_provider()
        handled = await dispatch_event(x_github_event, data, agent, settings.bot_username)
        if handled is not None:
            logfire.info(f"[{x_github_event}] handler finished (success={handled})")
    except Exception as e:
        logfire.exception(f"[{x_github_event}] Error processing webhook: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return {"status": "success"}
