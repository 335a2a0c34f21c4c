from __future__ import annotations

from enum import StrEnum


class ConnectionState(StrEnum):
    CLOSED = "closed"
    CONNECTING = "connecting"
    OPEN = "open"


class ChannelTrigger(StrEnum):
    CONNECT = "connect"
    TRANSPORT_OPEN = "transport_open"
    TRANSPORT_ERROR = "transport_error"
    TRANSPORT_CLOSE = "transport_close"
    DISCONNECT = "disconnect"


class NotificationType(StrEnum):
    EMAIL = "EMAIL"
    SMS = "SMS"
    IN_APP = "IN_APP"
    SYSTEM = "SYSTEM"


class NotificationPriority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class NotificationStatus(StrEnum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    SENDING = "SENDING"
    SENT = "SENT"
    FAILED = "FAILED"
