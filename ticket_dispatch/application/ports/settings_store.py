"""Port interface for the administrator-editable settings store."""

from abc import ABC, abstractmethod
from typing import Any


class SettingsStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> Any | None:
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        ...
