"""Asynchronous delivery to persistence sinks and comment collaborators."""

from __future__ import annotations

from .comments import CommentPoster, IssueTarget, deliver_comment
from .loop import BackgroundLoop
from .queue import DeliveryQueue
from .sinks import JsonlFileSink, LogSink, RestInsertSink

__all__ = [
    "BackgroundLoop",
    "CommentPoster",
    "DeliveryQueue",
    "IssueTarget",
    "JsonlFileSink",
    "LogSink",
    "RestInsertSink",
    "deliver_comment",
]
