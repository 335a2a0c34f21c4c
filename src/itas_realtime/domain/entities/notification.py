from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from itas_realtime.domain.value_objects.enums import (
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)


class Notification(BaseModel):
    """Portal notification as served by the backend (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int
    title: str
    message: str
    link: str | None = None
    notification_type: NotificationType = NotificationType.IN_APP
    priority: NotificationPriority = NotificationPriority.MEDIUM
    target_audience: str | None = None
    role: str | None = None
    status: NotificationStatus = NotificationStatus.SENT
    read: bool = False
    read_at: str | None = None
    sent_count: int = 0
    opened_count: int = 0
    created_at: str | None = None
