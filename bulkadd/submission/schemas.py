"""Wire schemas for the admin check-existing and bulk-add endpoints.

Both endpoints take the wrapped ``{"items": [...]}`` object; building the
request through these models guarantees that shape before any call is made.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ItemTypeName = Literal["restaurant", "dish"]


class CheckExistingItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    type: ItemTypeName
    city_id: int | None = None
    city: str | None = None
    google_place_id: str | None = None
    restaurant_name: str | None = None
    line_number: int = Field(alias="_lineNumber")


class CheckExistingRequest(BaseModel):
    items: list[CheckExistingItem] = Field(min_length=1)


class CheckExistingEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    existing: dict[str, Any] | None = None


class BulkAddItemPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    type: ItemTypeName
    address: str = ""
    city: str = ""
    state: str = ""
    zipcode: str = ""
    city_id: int | None = None
    neighborhood_id: int | None = None
    neighborhood_name: str = ""
    neighborhood_assigned: bool = True
    latitude: float | None = None
    longitude: float | None = None
    phone: str | None = None
    website: str | None = None
    place_id: str | None = None
    restaurant_name: str | None = None
    tags: list[str] = Field(default_factory=list)
    line_number: int = Field(alias="_lineNumber")


class BulkAddRequest(BaseModel):
    items: list[BulkAddItemPayload] = Field(min_length=1)


class BulkAddDetailInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str


class BulkAddDetail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    input: BulkAddDetailInput
    status: Literal["added", "skipped", "error"]
    reason: str | None = None
    id: int | None = None


class BulkAddResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    success: bool = True
    processed_count: int = Field(alias="processedCount", ge=0)
    added_count: int = Field(alias="addedCount", ge=0)
    skipped_count: int = Field(alias="skippedCount", ge=0)
    details: list[BulkAddDetail] = Field(default_factory=list)
