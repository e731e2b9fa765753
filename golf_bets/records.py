"""
Registros inmutables del motor de apuestas.

Round / Player / Score nunca se modifican en sitio: cada operación de
`rounds` devuelve una copia nueva (model_copy), así se puede recalcular la
liquidación en cada navegación sin efectos colaterales.
"""
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .wagers import WagerFormat


TEE_COLORS = ("negras", "azules", "blancas", "doradas", "plateadas", "rojas")
DEFAULT_TEE = "blancas"

StrokeIndex = Annotated[int, Field(ge=1, le=18)]


def check_tee_colors(by_tee: dict) -> dict:
    unknown = [tee for tee in by_tee if tee not in TEE_COLORS]
    if unknown:
        raise ValueError(f"Barras desconocidas: {unknown}")
    return by_tee


class Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Hole(Record):
    number: int = Field(ge=1, le=18)
    par: int = Field(ge=3, le=5)
    stroke_index: int = Field(ge=1, le=18)
    # HCP del hoyo por color de barras; si falta el color se usa stroke_index
    stroke_index_by_tee: dict[str, StrokeIndex] = Field(default_factory=dict)
    distance: int | None = None

    @field_validator("stroke_index_by_tee")
    @classmethod
    def _known_tees(cls, v):
        return check_tee_colors(v)

    def stroke_index_for(self, tee: str) -> int:
        return self.stroke_index_by_tee.get(tee, self.stroke_index)


class Score(Record):
    hole_number: int
    gross: int
    net: int
    strokes_received: int
    par: int
    stroke_index: int

    # marcas de apuestas laterales
    closest_to_pin: bool = False
    longest_drive: bool = False
    sand_save: bool = False


class Player(Record):
    id: str
    name: str
    handicap: int = Field(ge=0, le=54)
    scores: tuple[Score, ...] = ()
    gross_total: int = 0
    net_total: int = 0
    money_balance: float = 0.0

    def score_for(self, hole_number: int) -> Score | None:
        for s in self.scores:
            if s.hole_number == hole_number:
                return s
        return None


class BettingOptions(Record):
    formats: tuple[WagerFormat, ...] = ()

    def labels(self) -> list[str]:
        return [f.key for f in self.formats]


class Round(Record):
    id: str
    course: str
    holes: int = 18
    current_hole: int = 1
    tee: str = DEFAULT_TEE
    players: tuple[Player, ...] = ()
    betting_options: BettingOptions = BettingOptions()
    hole_table: tuple[Hole, ...] = ()
    completed: bool = False

    def hole(self, number: int) -> Hole | None:
        for h in self.hole_table:
            if h.number == number:
                return h
        return None

    def player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None


# Recorrido por defecto de la app (18 hoyos, par 72)
DEFAULT_HOLES = (
    Hole(number=1, par=4, stroke_index=7, distance=385),
    Hole(number=2, par=3, stroke_index=13, distance=165),
    Hole(number=3, par=5, stroke_index=1, distance=520),
    Hole(number=4, par=4, stroke_index=9, distance=410),
    Hole(number=5, par=3, stroke_index=17, distance=180),
    Hole(number=6, par=4, stroke_index=5, distance=395),
    Hole(number=7, par=4, stroke_index=11, distance=365),
    Hole(number=8, par=5, stroke_index=3, distance=485),
    Hole(number=9, par=4, stroke_index=15, distance=370),
    Hole(number=10, par=4, stroke_index=8, distance=375),
    Hole(number=11, par=3, stroke_index=14, distance=170),
    Hole(number=12, par=5, stroke_index=2, distance=510),
    Hole(number=13, par=4, stroke_index=10, distance=400),
    Hole(number=14, par=3, stroke_index=18, distance=155),
    Hole(number=15, par=4, stroke_index=6, distance=390),
    Hole(number=16, par=4, stroke_index=12, distance=360),
    Hole(number=17, par=5, stroke_index=4, distance=495),
    Hole(number=18, par=4, stroke_index=16, distance=380),
)
