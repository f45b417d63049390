# =============================================================================
# core/models/search.py - Search History Schemas
# =============================================================================
# A SearchRecord is the persisted projection of one successful lookup made by
# a signed-in user. Rows live in the `user_searches` table:
#
#   id | user_id | city | temperature | weather | created_at
#
# Row Level Security only lets a user read and insert rows whose user_id is
# their own auth.uid(). Rows are never updated or deleted by the app.
# =============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SearchRecord(BaseModel):
    """
    One entry of a user's search history.

    Field names follow the domain; aliases follow the table columns.

    Example row:
        {
            "id": 42,
            "user_id": "4f1c...",
            "city": "London",
            "temperature": 12.3,
            "weather": "Clouds",
            "created_at": "2024-01-15T10:30:00+00:00"
        }
    """

    id: int | str | None = Field(
        default=None,
        description="Row id assigned by the database"
    )

    owner_id: str = Field(
        ...,
        alias="user_id",
        description="Identity id of the owner"
    )

    city: str = Field(..., min_length=1)

    temperature: float | None = Field(
        default=None,
        description="Temperature in Celsius at search time"
    )

    weather_label: str = Field(
        default="Unknown",
        alias="weather",
        description="Short condition name, e.g. 'Clouds'"
    )

    created_at: datetime | None = Field(
        default=None,
        description="Set by the database on insert"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> SearchRecord:
        """Build a record from a `user_searches` row."""
        return cls.model_validate(row)

    def to_insert_row(self) -> dict[str, Any]:
        """
        Columns sent on insert.

        id and created_at are left to the database.
        """
        return {
            "user_id": self.owner_id,
            "city": self.city,
            "temperature": self.temperature,
            "weather": self.weather_label,
        }


def format_history_entry(record: SearchRecord) -> str:
    """
    One line of the history list.

    Example: "London - 12.3°C, Clouds (2024-01-15 10:30)"
    """
    temperature = f"{record.temperature:g}°C" if record.temperature is not None else "N/A"
    line = f"{record.city} - {temperature}, {record.weather_label}"
    if record.created_at:
        line += f" ({record.created_at.astimezone().strftime('%Y-%m-%d %H:%M')})"
    return line
