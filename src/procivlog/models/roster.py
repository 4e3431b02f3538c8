"""Vehicle and volunteer roster models."""

from __future__ import annotations

from pydantic import field_validator

from procivlog.models._base import ProcivModel


class Vehicle(ProcivModel):
    """A vehicle in the unit's fleet."""

    id: str
    plate: str
    model: str = ""

    @field_validator("plate")
    @classmethod
    def _normalize_plate(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def label(self) -> str:
        return f"{self.plate} - {self.model}" if self.model else self.plate


class Volunteer(ProcivModel):
    """A volunteer who may drive."""

    id: str
    name: str
    surname: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()
