"""FastAPI application for the PR review agent."""

import logfire
import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from pr_review_agent.config import get_settings
from pr_review_agent.webhooks import router as webhook_router

settings = get_settings()

logfire.configure(
    token=settings.logfire_token,
    environment=settings.logfire_env,
    service_name="pr-review-agent",
    send_to_logfire="if-token-present",
)

app = FastAPI(
    title="PR Review Agent",
    description="Reviews pull requests and answers comments on them.",
    version="0.1.0",
)

logfire.instrument_fastapi(app)

app.include_router(webhook_router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    """Liveness check."""
    return "GitHub PR Review Bot is running"


@app.get("/health")
async def health():
    """Health check for the deployment platform."""
    return {"status": "healthy"}


def main():
    """Run the webhook server."""
    logfire.info(f"PR review bot listening on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
