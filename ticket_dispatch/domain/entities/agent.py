"""Agent entity — a support employee tickets can be assigned to."""

from dataclasses import dataclass


@dataclass
class Agent:
    id: int | None
    name: str
    email: str | None = None
    active: bool = True
