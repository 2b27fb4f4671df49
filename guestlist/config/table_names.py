from enum import Enum


class TableNames(str, Enum):
    GUESTS = "guests"
    GUEST_HISTORY = "guest_history"
