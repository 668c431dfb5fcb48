"""GitHub PR review agent driven by webhooks."""
