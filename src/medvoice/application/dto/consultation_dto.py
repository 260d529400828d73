"""Consultation DTOs passed between the API and the workflow."""

from dataclasses import dataclass
from typing import Optional, Union

from ...domain.enums.clinical import EntityCategory


@dataclass(frozen=True)
class AudioPayload:
    """Recorded consultation audio."""

    data: bytes
    mime_type: str
    filename: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class AddEntity:
    category: EntityCategory
    text: str


@dataclass(frozen=True)
class UpdateEntity:
    """Edit the entity at ``index``; omitted fields keep their value."""

    index: int
    text: Optional[str] = None
    category: Optional[EntityCategory] = None


@dataclass(frozen=True)
class RemoveEntity:
    index: int


EntityEdit = Union[AddEntity, UpdateEntity, RemoveEntity]
