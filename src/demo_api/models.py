from pydantic import BaseModel, Field


class BuildingResponse(BaseModel):
    floors: int


class DropRequest(BaseModel):
    floor: int = Field(ge=0)


class DropResponse(BaseModel):
    floor: int
    broke: bool
