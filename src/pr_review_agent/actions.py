"""Structured actions the review agent can call as tools.

These are the only places that talk to the GitHub REST API directly. Every
action validates its parameters before making any network call.
"""

import asyncio
import re

import logfire
from pydantic import ValidationError

from pr_review_agent.config import get_settings
from pr_review_agent.github_client import call_github, get_github_client
from pr_review_agent.models import (
    CreateReviewCommentsParams,
    FileChange,
    PostedComment,
    PRAddress,
    PRFile,
    ReviewCommentSpec,
    ReviewResult,
)
from pr_review_agent.triggers import with_bot_marker

PR_URL_PATTERN = re.compile(r"github\.com/([^/]+)/([^/]+)/pull/(\d+)")


class InvalidPRUrlError(ValueError):
    """Raised when a string is not a GitHub pull request URL."""


class ActionError(RuntimeError):
    """Raised when the GitHub API fails during an action."""


def parse_pr_url(pr_url: str) -> PRAddress:
    """Parse https://github.com/{owner}/{repo}/pull/{number} into a PRAddress."""
    match = PR_URL_PATTERN.search(pr_url) if isinstance(pr_url, str) else None
    if not match:
        raise InvalidPRUrlError(f"Invalid GitHub PR URL format: {pr_url!r}")

    owner, repo, number = match.groups()
    try:
        return PRAddress(owner=owner, repo=repo, number=int(number))
    except ValidationError as e:
        raise InvalidPRUrlError(f"Invalid GitHub PR URL format: {pr_url!r}") from e


async def _get_pull(address: PRAddress):
    github = get_github_client()
    repo = await call_github(github.get_repo, address.full_name)
    pr = await call_github(repo.get_pull, address.number)
    return repo, pr


async def get_pr_files(pr_url: str) -> list[PRFile]:
    """List the files changed in a GitHub pull request.

    Args:
        pr_url: Full URL of the GitHub PR (e.g. https://github.com/owner/repo/pull/123)

    Returns:
        One entry per changed file with its status, line counts and patch.
    """
    address = parse_pr_url(pr_url)

    try:
        _, pr = await _get_pull(address)
        files = await call_github(lambda: list(pr.get_files()))
    except Exception as e:
        raise ActionError(f"Failed to list PR files for {address}: {e}") from e

    logfire.info(f"[files] {address} - {len(files)} files changed")
    return [
        PRFile(
            filename=f.filename,
            status=f.status,
            additions=f.additions,
            deletions=f.deletions,
            patch=f.patch,
        )
        for f in files
    ]


async def get_file_before_after(pr_url: str) -> list[FileChange]:
    """Get the before and after content of every file changed in a GitHub PR.

    Args:
        pr_url: Full URL of the GitHub PR (e.g. https://github.com/owner/repo/pull/123)

    Returns:
        One entry per changed file, in the PR's file order. before_content is
        null for added files and after_content is null for removed files.
    """
    address = parse_pr_url(pr_url)
    settings = get_settings()
    prefix = f"[files] {address}"

    try:
        repo, pr = await _get_pull(address)
        files = await call_github(lambda: list(pr.get_files()))
    except Exception as e:
        raise ActionError(f"Failed to fetch PR file contents for {address}: {e}") from e

    head_sha = pr.head.sha
    base_sha = pr.base.sha
    semaphore = asyncio.Semaphore(max(settings.file_fetch_concurrency, 1))

    async def fetch_content(path: str, ref: str, side: str) -> str | None:
        async with semaphore:
            try:
                contents = await call_github(repo.get_contents, path, ref=ref)
                if isinstance(contents, list):
                    # A directory, e.g. a submodule path
                    return None
                return contents.decoded_content.decode("utf-8")
            except Exception as e:
                logfire.warn(f"{prefix} - failed to fetch {side} content for {path}: {e}")
                return None

    async def build_change(f) -> FileChange:
        after_content = None
        before_content = None
        if f.status != "removed":
            after_content = await fetch_content(f.filename, head_sha, "head")
        if f.status != "added":
            base_path = f.previous_filename if f.status == "renamed" else f.filename
            before_content = await fetch_content(base_path or f.filename, base_sha, "base")
        return FileChange(
            filename=f.filename,
            before_content=before_content,
            after_content=after_content,
        )

    changes = await asyncio.gather(*(build_change(f) for f in files))
    logfire.info(f"{prefix} - fetched contents for {len(changes)} files")
    return list(changes)


async def create_review_comments(
    pr_url: str,
    filename: str,
    comments: list[ReviewCommentSpec],
) -> ReviewResult:
    """Create inline review comments on one file of a GitHub pull request.

    All comments are posted together as a single review on the PR's head commit.

    Args:
        pr_url: Full URL of the GitHub PR (e.g. https://github.com/owner/repo/pull/123)
        filename: Path of the file to comment on, relative to the repo root
        comments: Comments to post, each with a line number in the new file and text

    Returns:
        The created review's ID and the number of comments it contains.
    """
    try:
        params = CreateReviewCommentsParams.model_validate(
            {"pr_url": pr_url, "filename": filename, "comments": comments}
        )
    except ValidationError as e:
        raise ValueError(
            "Invalid parameters: pr_url and filename must be strings and comments must be "
            f"a non-empty list of {{line: int, comment: str}} objects ({e.error_count()} errors)"
        ) from e

    address = parse_pr_url(params.pr_url)
    prefix = f"[review] {address}"

    try:
        repo, pr = await _get_pull(address)
        commit = await call_github(repo.get_commit, pr.head.sha)
        review = await call_github(
            pr.create_review,
            commit=commit,
            event="COMMENT",
            comments=[
                {
                    "path": params.filename,
                    "line": c.line,
                    "body": with_bot_marker(c.comment),
                    "side": "RIGHT",
                }
                for c in params.comments
            ],
        )
    except Exception as e:
        raise ActionError(f"Failed to create review comments on {address}: {e}") from e

    logfire.info(f"{prefix} - posted review {review.id} with {len(params.comments)} comments")
    return ReviewResult(review_id=review.id, comment_count=len(params.comments))


async def add_issue_comment(pr_url: str, body: str) -> PostedComment:
    """Post a top-level comment on a GitHub pull request.

    Args:
        pr_url: Full URL of the GitHub PR (e.g. https://github.com/owner/repo/pull/123)
        body: Markdown text of the comment

    Returns:
        The ID and final body of the posted comment.
    """
    if not isinstance(body, str) or not body.strip():
        raise ValueError("Invalid parameters: body must be a non-empty string")

    address = parse_pr_url(pr_url)

    # Replies must carry the marker so we never respond to ourselves
    body = with_bot_marker(body)

    try:
        github = get_github_client()
        repo = await call_github(github.get_repo, address.full_name)
        issue = await call_github(repo.get_issue, address.number)
        comment = await call_github(issue.create_comment, body)
    except Exception as e:
        raise ActionError(f"Failed to comment on {address}: {e}") from e

    logfire.info(f"[comment] {address} - posted comment {comment.id} ({len(body)} chars)")
    return PostedComment(comment_id=comment.id, body=body)


AGENT_ACTIONS = [
    get_pr_files,
    get_file_before_after,
    create_review_comments,
    add_issue_comment,
]
