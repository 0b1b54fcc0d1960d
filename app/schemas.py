from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class RouteRequestPayload(BaseModel):
    # either the three named parts or the raw "ROUTE_REQUEST:<src>:<dst>:<type>" message
    source_well_name: Optional[str] = None
    destination_well_name: Optional[str] = None
    route_type: Optional[str] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def _one_form(self):
        named = self.source_well_name and self.destination_well_name
        if not named and not self.message:
            raise ValueError("provide source_well_name + destination_well_name, or message")
        return self


class PairPayload(BaseModel):
    source_well_id: str
    destination_well_id: str
    include_waypoints: bool = False
    max_routes: Optional[int] = Field(default=None, ge=1)
    save: bool = False


class MultiWellPayload(BaseModel):
    well_ids: List[str]
    start_well_id: str
    end_well_id: Optional[str] = None
    save: bool = False
