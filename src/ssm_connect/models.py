from __future__ import annotations

from dataclasses import dataclass

NAME_PLACEHOLDER = "N/A"


@dataclass(slots=True, frozen=True)
class InstanceRecord:
    instance_id: str
    name: str | None = None
    private_ip: str | None = None

    @property
    def display_name(self) -> str:
        if self.name and self.name.strip():
            return self.name
        return NAME_PLACEHOLDER


@dataclass(slots=True, frozen=True)
class InstanceSelected:
    instance_id: str


@dataclass(slots=True, frozen=True)
class SelectionCancelled:
    pass


@dataclass(slots=True, frozen=True)
class SelectionInvalid:
    message: str


SelectionOutcome = InstanceSelected | SelectionCancelled | SelectionInvalid


@dataclass(slots=True, frozen=True)
class SessionOutcome:
    returncode: int | None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.returncode == 0
