from enum import Enum


class RealtimeEvent(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
