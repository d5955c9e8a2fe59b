"""
Event Context Model
===================
Pydantic models for the GitHub Actions context payload (GITHUB_CONTEXT).

Only the fields the bot acts on are modelled; everything else in the payload
is ignored. Decoded once per run and never mutated.

Body resolution:
    created                     - always a new comment → comment body
    opened                      - always a new issue   → issue body
    edited + issue_comment      - comment edit         → comment body
    edited + anything else      - issue edit           → issue body
    anything else               - UnhandledEvent
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from iocost_bot.core.errors import MalformedPayload, MissingContent, UnhandledEvent

COMMENT_EVENT = "issue_comment"


class EventAction(str, Enum):
    OPENED = "opened"
    EDITED = "edited"
    CREATED = "created"
    OTHER = "other"

    @classmethod
    def classify(cls, action: str) -> "EventAction":
        try:
            return cls(action)
        except ValueError:
            return cls.OTHER


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    number: int
    locked: bool
    state: str
    body: Optional[str] = None


class Comment(BaseModel):
    model_config = ConfigDict(frozen=True)

    body: Optional[str] = None


class Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: str
    issue: Issue
    comment: Optional[Comment] = None


class EventContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_name: str
    event: Event

    @property
    def action(self) -> EventAction:
        return EventAction.classify(self.event.action)

    @property
    def issue(self) -> Issue:
        return self.event.issue

    @property
    def is_inactive(self) -> bool:
        """True for locked or non-open issues, which the bot leaves alone."""
        return self.issue.locked or self.issue.state != "open"

    @property
    def is_comment_event(self) -> bool:
        return self.event_name == COMMENT_EVENT


def decode_event_context(raw_payload: str) -> EventContext:
    """
    Decode the serialized GitHub context.

    Raises
    ------
    MalformedPayload
        If the payload is not JSON or lacks the fields modelled above.
    """
    try:
        return EventContext.model_validate_json(raw_payload)
    except ValidationError as e:
        raise MalformedPayload(f"Event payload is not a usable GitHub context: {e}") from e


def resolve_body(context: EventContext) -> str:
    """
    Return the free text that triggered this run.

    Raises
    ------
    UnhandledEvent
        For any action other than opened, edited or created.
    MissingContent
        If the selected issue or comment body is absent.
    """
    action = context.action

    if action == EventAction.CREATED:
        use_comment = True
    elif action == EventAction.OPENED:
        use_comment = False
    elif action == EventAction.EDITED:
        use_comment = context.is_comment_event
    else:
        raise UnhandledEvent(context.event_name, context.event.action)

    if use_comment:
        comment = context.event.comment
        body = comment.body if comment is not None else None
        source = "comment"
    else:
        body = context.issue.body
        source = "issue"

    if body is None:
        raise MissingContent(
            f"Could not obtain the contents of the {source} for "
            f"{context.event_name} / {context.event.action}"
        )
    return body
