"""Statistics schema for summaries over a filtered entry set."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class EvidenceStatistics(BaseModel):
    total_entries: int = 0
    avg_rating: Optional[float] = None
    positive_entries: int = 0  # rating >= 4
    neutral_entries: int = 0  # rating == 3
    negative_entries: int = 0  # rating <= 2
    unique_employees: int = 0
    unique_managers: int = 0
    dimensions_covered: int = 0
    by_dimension: dict[str, int] = Field(default_factory=dict)
