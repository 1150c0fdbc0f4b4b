"""
Catalog Schemas
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field


class Photo(BaseModel):
    filename: str
    url: str


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    part_code: str = Field(..., alias="partCode")
    photos: List[Photo]


class HealthResponse(BaseModel):
    status: str
    message: str
