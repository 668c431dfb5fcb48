"""Tests for the PR and comment handlers."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from pr_review_agent.handlers import (
    handle_issue_comment,
    handle_new_pull_request,
    handle_review_comment,
)
from pr_review_agent.models import (
    CodeReviewResponse,
    CommentResponse,
    IssueCommentEvent,
    PullRequestEvent,
    ReviewCommentEvent,
)
from pr_review_agent.triggers import BOT_MARKER

BOT_NAME = "github-bot"

REPOSITORY = {"name": "widgets", "full_name": "octo/widgets", "owner": {"login": "octo"}}


def make_agent(side_effect=None) -> MagicMock:
    agent = MagicMock()
    agent.run = AsyncMock(side_effect=side_effect)
    return agent


def issue_comment_payload(body: str, is_pr: bool = True) -> IssueCommentEvent:
    issue = {"number": 12, "title": "Add caching"}
    if is_pr:
        issue["pull_request"] = {"url": "https://api.github.com/repos/octo/widgets/pulls/12"}
    return IssueCommentEvent.model_validate(
        {
            "action": "created",
            "issue": issue,
            "comment": {"id": 1, "body": body, "user": {"login": "alice"}},
            "repository": REPOSITORY,
        }
    )


def review_comment_payload(body: str, line: int | None = 17, position: int | None = None):
    comment = {"id": 2, "body": body, "user": {"login": "bob"}, "path": "src/cache.py"}
    if line is not None:
        comment["line"] = line
    if position is not None:
        comment["position"] = position
    return ReviewCommentEvent.model_validate(
        {
            "action": "created",
            "pull_request": {"number": 12},
            "comment": comment,
            "repository": REPOSITORY,
        }
    )


class TestHandleNewPullRequest:
    @pytest.mark.asyncio
    async def test_calls_agent_once_with_review_schema(self):
        """Test that a new PR triggers exactly one review instruction."""
        agent = make_agent()
        payload = PullRequestEvent.model_validate(
            {"action": "opened", "pull_request": {"number": 7}, "repository": REPOSITORY}
        )

        result = await handle_new_pull_request(payload, agent)

        assert result is True
        agent.run.assert_awaited_once()
        instruction, output_type = agent.run.call_args.args
        assert "#7" in instruction
        assert "octo/widgets" in instruction
        assert "https://github.com/octo/widgets/pull/7" in instruction
        assert BOT_MARKER in instruction
        assert output_type is CodeReviewResponse

    @pytest.mark.asyncio
    async def test_agent_failure_returns_false(self):
        """Test that agent errors are logged and turned into False."""
        agent = make_agent(side_effect=RuntimeError("model overloaded"))
        payload = PullRequestEvent.model_validate(
            {"action": "synchronize", "pull_request": {"number": 7}, "repository": REPOSITORY}
        )

        result = await handle_new_pull_request(payload, agent)

        assert result is False


class TestHandleIssueComment:
    @pytest.mark.asyncio
    async def test_trigger_comment_calls_agent(self):
        """Test that a triggering comment produces one reply instruction."""
        agent = make_agent()
        payload = issue_comment_payload("Can you explain why this is cached?")

        result = await handle_issue_comment(payload, agent, BOT_NAME)

        assert result is True
        agent.run.assert_awaited_once()
        instruction, output_type = agent.run.call_args.args
        assert "Can you explain why this is cached?" in instruction
        assert "Comment Author: alice" in instruction
        assert "PR #12 in octo/widgets" in instruction
        assert f"MUST start with this exact emoji: {BOT_MARKER}" in instruction
        assert output_type is CommentResponse

    @pytest.mark.asyncio
    async def test_non_trigger_comment_skips_agent(self):
        """Test that comments without triggers cost no agent call."""
        agent = make_agent()
        payload = issue_comment_payload("LGTM")

        result = await handle_issue_comment(payload, agent, BOT_NAME)

        assert result is False
        agent.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_bot_comment_skips_agent(self):
        """Test that our own comments are ignored by the classifier."""
        agent = make_agent()
        payload = issue_comment_payload(f"{BOT_MARKER}Happy to help with the review!")

        result = await handle_issue_comment(payload, agent, BOT_NAME)

        assert result is False
        agent.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_plain_issue_is_ignored(self):
        """Test that comments on plain issues are never handled."""
        agent = make_agent()
        payload = issue_comment_payload("help please", is_pr=False)

        result = await handle_issue_comment(payload, agent, BOT_NAME)

        assert result is False
        agent.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_pull_request_object_is_a_pr(self):
        """Test that an empty pull_request object still marks the issue as a PR."""
        agent = make_agent()
        payload = issue_comment_payload("help please", is_pr=False)
        payload.issue.pull_request = {}

        assert await handle_issue_comment(payload, agent, BOT_NAME) is True
        agent.run.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_mention_uses_configured_bot_name(self):
        """Test that @mentions use the configured bot name."""
        agent = make_agent()
        payload = issue_comment_payload("@widget-keeper merge?")

        assert await handle_issue_comment(payload, agent, "widget-keeper") is True
        assert await handle_issue_comment(payload, make_agent(), "someone-else") is False

    @pytest.mark.asyncio
    async def test_agent_failure_returns_false(self):
        """Test that agent errors are swallowed at the handler."""
        agent = make_agent(side_effect=Exception("boom"))
        payload = issue_comment_payload("help")

        assert await handle_issue_comment(payload, agent, BOT_NAME) is False


class TestHandleReviewComment:
    @pytest.mark.asyncio
    async def test_includes_file_and_line(self):
        """Test that inline comments pass their location to the agent."""
        agent = make_agent()
        payload = review_comment_payload("Why not use a dict here? help", line=17)

        result = await handle_review_comment(payload, agent, BOT_NAME)

        assert result is True
        instruction, output_type = agent.run.call_args.args
        assert "File: src/cache.py" in instruction
        assert "Line: 17" in instruction
        assert "Comment Author: bob" in instruction
        assert BOT_MARKER in instruction
        assert output_type is CommentResponse

    @pytest.mark.asyncio
    async def test_falls_back_to_position(self):
        """Test that diff position is used when line is missing."""
        agent = make_agent()
        payload = review_comment_payload("review this", line=None, position=4)

        await handle_review_comment(payload, agent, BOT_NAME)

        assert "Line: 4" in agent.run.call_args.args[0]

    @pytest.mark.asyncio
    async def test_missing_location_is_na(self):
        """Test that a comment without line or position says N/A."""
        agent = make_agent()
        payload = review_comment_payload("review this", line=None)

        await handle_review_comment(payload, agent, BOT_NAME)

        assert "Line: N/A" in agent.run.call_args.args[0]

    @pytest.mark.asyncio
    async def test_non_trigger_comment_skips_agent(self):
        """Test that non-triggering review comments are ignored."""
        agent = make_agent()
        payload = review_comment_payload("nit: typo")

        assert await handle_review_comment(payload, agent, BOT_NAME) is False
        agent.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_agent_failure_returns_false(self):
        """Test that agent errors become False."""
        agent = make_agent(side_effect=TimeoutError())
        payload = review_comment_payload("explain")

        assert await handle_review_comment(payload, agent, BOT_NAME) is False
