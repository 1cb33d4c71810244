"""
Issue timeline events.

A timeline is a heterogeneous list keyed by the ``event`` tag. Each variant
carries only its own payload: comments have a body, label changes a label,
assignment changes an assignee. Every other event kind (closed, reopened,
referenced, ...) is stored as a ``GenericEvent``.
"""

from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Discriminator, Tag

COMMENT_EVENTS = {"commented"}
LABEL_EVENTS = {"labeled", "unlabeled"}
ASSIGNEE_EVENTS = {"assigned", "unassigned"}


class TimelineActor(BaseModel):
    login: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None


class TimelineLabel(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None


class TimelineAssignee(BaseModel):
    login: Optional[str] = None
    avatar_url: Optional[str] = None


class _TimelineEventBase(BaseModel):
    event: str
    created_at: Optional[datetime] = None
    actor: Optional[TimelineActor] = None
    html_url: Optional[str] = None


class CommentedEvent(_TimelineEventBase):
    event: Literal["commented"] = "commented"
    body: Optional[str] = None


class LabelEvent(_TimelineEventBase):
    event: Literal["labeled", "unlabeled"]
    label: TimelineLabel


class AssigneeEvent(_TimelineEventBase):
    event: Literal["assigned", "unassigned"]
    assignee: TimelineAssignee


class GenericEvent(_TimelineEventBase):
    pass


def _event_kind(value: Any) -> str:
    if isinstance(value, dict):
        event = value.get("event")
        label = value.get("label")
        assignee = value.get("assignee")
    else:
        event = getattr(value, "event", None)
        label = getattr(value, "label", None)
        assignee = getattr(value, "assignee", None)

    if event in COMMENT_EVENTS:
        return "comment"
    if event in LABEL_EVENTS and label is not None:
        return "label"
    if event in ASSIGNEE_EVENTS and assignee is not None:
        return "assignee"
    return "other"


TimelineEvent = Annotated[
    Union[
        Annotated[CommentedEvent, Tag("comment")],
        Annotated[LabelEvent, Tag("label")],
        Annotated[AssigneeEvent, Tag("assignee")],
        Annotated[GenericEvent, Tag("other")],
    ],
    Discriminator(_event_kind),
]

Timeline = List[TimelineEvent]
