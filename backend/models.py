from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

PROJECT_ID_PATTERN = r"^[A-Za-z0-9_-]{1,128}$"


class ExportRequest(BaseModel):
    """Body of POST /api/export-pdf. Emptiness is checked by the export service, not here."""
    model_config = ConfigDict(populate_by_name=True)

    project_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("projectId", "project_id"),
    )


class Slide(BaseModel):
    """One A3 page of the printed deck."""
    title: str = ""
    subtitle: str = ""
    body: str = ""
    image_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("image_url", "imageUrl"),
    )
    caption: str = ""


class Project(BaseModel):
    """
    A saved presentation deck for one customer.

    Slides are printed in list order, one page each.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(pattern=PROJECT_ID_PATTERN)
    name: str = ""
    customer_name: str = Field(
        default="",
        validation_alias=AliasChoices("customer_name", "customerName"),
    )
    slides: List[Slide] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("name", "customer_name")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class ProjectUpsert(BaseModel):
    """Body of PUT /projects/{project_id}; the id comes from the path."""
    name: str = ""
    customer_name: str = Field(
        default="",
        validation_alias=AliasChoices("customer_name", "customerName"),
    )
    slides: List[Slide] = Field(default_factory=list)
