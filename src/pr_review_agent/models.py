"""Pydantic models for GitHub webhook payloads and agent actions."""

from pydantic import BaseModel, Field, StrictInt, StrictStr


class GitHubUser(BaseModel):
    """GitHub user information."""

    login: str


class GitHubRepository(BaseModel):
    """GitHub repository information."""

    name: str
    owner: GitHubUser
    full_name: str | None = None


class GitHubPullRequest(BaseModel):
    """GitHub pull request information."""

    number: int
    title: str | None = None
    head: dict = Field(default_factory=dict)  # contains sha, ref, repo info
    base: dict = Field(default_factory=dict)


class GitHubIssue(BaseModel):
    """GitHub issue information. PRs carry a pull_request key."""

    number: int
    title: str | None = None
    pull_request: dict | None = None


class GitHubComment(BaseModel):
    """GitHub comment information (issue or inline review comment)."""

    id: int | None = None
    body: str
    user: GitHubUser
    # Only present on review comments
    path: str | None = None
    line: int | None = None
    position: int | None = None


class PullRequestEvent(BaseModel):
    """Payload for pull_request webhook events."""

    action: str
    pull_request: GitHubPullRequest
    repository: GitHubRepository


class IssueCommentEvent(BaseModel):
    """Payload for issue_comment webhook events."""

    action: str
    issue: GitHubIssue
    comment: GitHubComment
    repository: GitHubRepository


class ReviewCommentEvent(BaseModel):
    """Payload for pull_request_review_comment webhook events."""

    action: str
    pull_request: GitHubPullRequest
    comment: GitHubComment
    repository: GitHubRepository


class PRAddress(BaseModel):
    """Owner/repo/number triple addressing a single pull request."""

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    number: int = Field(gt=0)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/pull/{self.number}"

    def __str__(self) -> str:
        return f"{self.full_name}#{self.number}"


class CommentEvent(BaseModel):
    """Normalized view over an issue comment or an inline review comment."""

    body: str
    author: str
    path: str | None = None
    line: int | None = None

    @classmethod
    def from_comment(cls, comment: GitHubComment) -> "CommentEvent":
        line = comment.line if comment.line is not None else comment.position
        return cls(
            body=comment.body,
            author=comment.user.login,
            path=comment.path,
            line=line,
        )


class ReviewCommentSpec(BaseModel):
    """A single inline comment to post as part of a review."""

    line: StrictInt = Field(ge=1, description="Line number in the new version of the file")
    comment: StrictStr = Field(description="The comment text")


class CreateReviewCommentsParams(BaseModel):
    """Parameters accepted by the create_review_comments action."""

    pr_url: StrictStr
    filename: StrictStr = Field(min_length=1)
    comments: list[ReviewCommentSpec] = Field(min_length=1)


class ReviewResult(BaseModel):
    """Result of posting a batch of review comments."""

    review_id: int
    comment_count: int


class PRFile(BaseModel):
    """A file changed in a pull request."""

    filename: str
    status: str
    additions: int = 0
    deletions: int = 0
    patch: str | None = None


class FileChange(BaseModel):
    """Before/after snapshot of one file touched by a PR.

    before_content is None for added files, after_content is None for
    removed files (or when the fetch failed).
    """

    filename: str
    before_content: str | None = None
    after_content: str | None = None


class CodeReviewResponse(BaseModel):
    """Response expected from the agent after reviewing a PR."""

    summary: str = Field(description="Overview of the review that was posted")
    comment_count: int = Field(default=0, description="Number of inline comments posted")
    files_reviewed: list[str] = Field(
        default_factory=list,
        description="Files that received review comments",
    )


class CommentResponse(BaseModel):
    """Response expected from the agent after replying to a comment."""

    response: str = Field(description="The reply text that was posted")
    posted: bool = Field(default=True, description="Whether the reply was posted")


class PostedComment(BaseModel):
    """Result of posting a top-level PR comment."""

    comment_id: int
    body: str
