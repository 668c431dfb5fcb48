"""Handlers for new PRs and PR comments.

Each handler builds one instruction for the review agent. Posting reviews and
replies is left to the agent, through the actions in actions.py.
"""

import logfire

from pr_review_agent.agent import ReviewAgent
from pr_review_agent.models import (
    CodeReviewResponse,
    CommentEvent,
    CommentResponse,
    IssueCommentEvent,
    PRAddress,
    PullRequestEvent,
    ReviewCommentEvent,
)
from pr_review_agent.triggers import BOT_MARKER, should_respond


def pr_address(repository, number: int) -> PRAddress:
    """Build a PRAddress from a webhook repository object and PR number."""
    return PRAddress(owner=repository.owner.login, repo=repository.name, number=number)


def build_review_instruction(address: PRAddress) -> str:
    return f"""Review pull request #{address.number} in repo {address.full_name} ({address.url}) \
by leaving comments on specific files in the PR.

1. Look at the changed files and their before/after content
2. Leave inline review comments on lines with real issues (bugs, edge cases, security)
3. After that, post one comment on the PR giving an overview of what you reviewed and found

IMPORTANT: Every comment you post MUST start with this exact emoji: {BOT_MARKER}"""


def build_comment_instruction(address: PRAddress, comment: CommentEvent) -> str:
    return f"""Respond to this comment on PR #{address.number} in {address.full_name} ({address.url}):

Comment: {comment.body}
Comment Author: {comment.author}

1. Generate a brief, helpful response that addresses the comment directly
2. Post your response as a comment on the PR
3. Be concise and focused on addressing the specific points in the comment

IMPORTANT: Your comment MUST start with this exact emoji: {BOT_MARKER}"""


def build_review_comment_instruction(address: PRAddress, comment: CommentEvent) -> str:
    line = comment.line if comment.line is not None else "N/A"
    return f"""Respond to this code review comment on PR #{address.number} in \
{address.full_name} ({address.url}):

Comment: {comment.body}
Comment Author: {comment.author}
File: {comment.path}
Line: {line}

Follow these steps:
1. Get the content of the file, focusing on the relevant code
2. Generate a brief, technical response addressing the comment
3. Include code examples if appropriate
4. Post your response as a comment on this PR

IMPORTANT: Your comment MUST start with this exact emoji: {BOT_MARKER}

Your response should be concise, helpful, and address the specific points in the comment."""


async def handle_new_pull_request(payload: PullRequestEvent, agent: ReviewAgent) -> bool:
    """Review a newly opened or updated PR."""
    address = pr_address(payload.repository, payload.pull_request.number)
    prefix = f"[pull_request] {address}"

    with logfire.span(prefix, repo=address.full_name, pr_number=address.number):
        logfire.info(f"{prefix} - reviewing (action={payload.action})")
        try:
            await agent.run(build_review_instruction(address), CodeReviewResponse)
        except Exception as e:
            logfire.error(f"{prefix} - review failed: {e}")
            return False

        logfire.info(f"{prefix} - review with line comments completed")
        return True


async def handle_issue_comment(
    payload: IssueCommentEvent,
    agent: ReviewAgent,
    bot_name: str,
) -> bool:
    """Reply to a top-level comment on a PR."""
    address = pr_address(payload.repository, payload.issue.number)
    prefix = f"[issue_comment] {address}"

    # Plain issues are not PRs
    if payload.issue.pull_request is None:
        logfire.info(f"{prefix} - skipped (not a PR)")
        return False

    comment = CommentEvent.from_comment(payload.comment)
    if not should_respond(comment.body, bot_name):
        logfire.info(f"{prefix} @{comment.author} - skipped (no trigger)")
        return False

    with logfire.span(prefix, repo=address.full_name, pr_number=address.number):
        logfire.info(f"{prefix} @{comment.author} - responding to comment")
        try:
            await agent.run(build_comment_instruction(address, comment), CommentResponse)
        except Exception as e:
            logfire.error(f"{prefix} - error responding to comment: {e}")
            return False

        logfire.info(f"{prefix} - response generated and posted")
        return True


async def handle_review_comment(
    payload: ReviewCommentEvent,
    agent: ReviewAgent,
    bot_name: str,
) -> bool:
    """Reply to an inline review comment on a PR."""
    address = pr_address(payload.repository, payload.pull_request.number)
    prefix = f"[review_comment] {address}"

    comment = CommentEvent.from_comment(payload.comment)
    if not should_respond(comment.body, bot_name):
        logfire.info(f"{prefix} @{comment.author} - skipped (no trigger)")
        return False

    with logfire.span(prefix, repo=address.full_name, pr_number=address.number, path=comment.path):
        logfire.info(f"{prefix} @{comment.author} - responding to review comment on {comment.path}")
        try:
            await agent.run(build_review_comment_instruction(address, comment), CommentResponse)
        except Exception as e:
            logfire.error(f"{prefix} - error responding to review comment: {e}")
            return False

        logfire.info(f"{prefix} - response posted to review comment")
        return True
