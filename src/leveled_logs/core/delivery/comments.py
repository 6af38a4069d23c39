"""Issue comment posting collaborator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IssueTarget:
    """Addressing triple for an issue or pull request comment."""

    owner: str
    repo: str
    issue_number: int


class CommentPoster(Protocol):
    """Anything that can create a comment on an issue."""

    async def create_comment(self, *, owner: str, repo: str, issue_number: int, body: str) -> None:
        ...


async def deliver_comment(poster: CommentPoster, target: IssueTarget, body: str) -> None:
    """Post ``body``; failures are logged at DEBUG and never raised."""
    try:
        await poster.create_comment(
            owner=target.owner,
            repo=target.repo,
            issue_number=target.issue_number,
            body=body,
        )
    except Exception:
        logger.debug(
            "Failed to post log comment to %s/%s#%s",
            target.owner,
            target.repo,
            target.issue_number,
            exc_info=True,
        )
