from .base import Base, BaseModel, CreatedAt, SoftDelete, TimeStamp

__all__ = [
    "Base",
    "BaseModel",
    "CreatedAt",
    "SoftDelete",
    "TimeStamp",
]
