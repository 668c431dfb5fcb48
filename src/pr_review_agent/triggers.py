"""Decide whether a comment should get a response from the bot."""

# Every comment the bot posts starts with this prefix
BOT_MARKER = "🤖 "

TRIGGER_WORDS = (
    "bot",
    "ai",
    "review",
    "help",
    "explain",
    "what do you think",
    "can you suggest",
)


def is_bot_comment(body: str | None) -> bool:
    """Check the raw comment body for the bot marker prefix."""
    if not body:
        return False
    return body.startswith(BOT_MARKER)


def should_respond(comment_body: str, bot_name: str) -> bool:
    """Return True if the comment mentions the bot or contains a trigger word.

    Comments that start with BOT_MARKER (ignoring leading whitespace) were
    written by us and never trigger a response. Matching is a plain
    case-insensitive substring check, so "bot" also matches "robot".
    """
    if comment_body.lstrip().startswith(BOT_MARKER):
        return False

    triggers = (f"@{bot_name}", *TRIGGER_WORDS)
    lower_comment = comment_body.lower()
    return any(trigger.lower() in lower_comment for trigger in triggers)


def with_bot_marker(body: str) -> str:
    """Return body starting with exactly one BOT_MARKER and no leading whitespace."""
    stripped = body.lstrip()
    if stripped.startswith(BOT_MARKER):
        return stripped
    return BOT_MARKER + stripped
