"""Pydantic models for schedule queries and cached results.

The schedule document itself is not modelled: the portal's ``week`` object
is passed through untouched.
"""

import json
from typing import Any

from pydantic import BaseModel, field_validator

from src.schedule_proxy.errors import MissingParameterError

ScheduleDocument = Any


class ScheduleQuery(BaseModel):
    """One schedule lookup, e.g. ``type=group, value=501``."""

    type: str
    value: str
    date_start: str | None = None  # dateStart, passed through as given
    date_end: str | None = None  # dateEnd

    @field_validator("date_start", "date_end", mode="before")
    @classmethod
    def _blank_date_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v:
            return None
        return v

    @classmethod
    def from_params(
        cls,
        type: str | None,
        value: str | None,
        date_start: str | None = None,
        date_end: str | None = None,
    ) -> "ScheduleQuery":
        """Build a query from raw request parameters.

        Raises:
            MissingParameterError: If ``type`` or ``value`` is missing or empty.
        """
        missing = [
            name for name, given in (("type", type), ("value", value)) if not given
        ]
        if missing:
            raise MissingParameterError(
                f"Missing required parameter(s): {', '.join(missing)}"
            )
        return cls(type=type, value=value, date_start=date_start, date_end=date_end)

    @property
    def cache_key(self) -> str:
        """Deterministic key over the full query tuple.

        A JSON array keeps components apart even when they contain the
        separator, and an absent date (JSON null) never equals the string
        ``"null"``.
        """
        return json.dumps(
            [self.type, self.value, self.date_start, self.date_end],
            ensure_ascii=False,
        )


class CacheEntry(BaseModel):
    """A cached schedule document and the monotonic time it was fetched."""

    payload: ScheduleDocument
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at
