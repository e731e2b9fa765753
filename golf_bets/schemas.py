from pydantic import BaseModel, Field, field_validator
from typing import Optional

from .records import StrokeIndex, check_tee_colors
from .wagers import WagerFormat


class HoleCreate(BaseModel):
    number: int = Field(ge=1, le=18)
    par: int = Field(ge=3, le=5)
    stroke_index: int = Field(ge=1, le=18)
    stroke_index_by_tee: dict[str, StrokeIndex] = Field(default_factory=dict)
    distance: Optional[int] = None

    @field_validator("stroke_index_by_tee")
    @classmethod
    def _known_tees(cls, v):
        return check_tee_colors(v)


class CourseCreate(BaseModel):
    name: str
    city: Optional[str] = None
    holes: list[HoleCreate] = Field(default_factory=list)


class RoundPlayerCreate(BaseModel):
    name: str
    handicap: int = 18


class RoundCreate(BaseModel):
    # sin campo -> recorrido por defecto
    course_id: Optional[int] = None
    course_name: Optional[str] = None
    holes: int = 18
    tee: str = "blancas"
    players: list[RoundPlayerCreate]
    # en match_play por parejas, los equipos van por nombre de jugador
    formats: list[WagerFormat] = Field(default_factory=list)


class ScoreEntry(BaseModel):
    gross: int
    closest_to_pin: bool = False
    longest_drive: bool = False
    sand_save: bool = False
