from typing import NamedTuple

from .exceptions import InvalidInput

MAX_HANDICAP = 54


class NetScore(NamedTuple):
    net_score: int
    strokes_received: int


def _check_int(name: str, value, low: int, high: int | None = None):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} debe ser un entero, recibido {value!r}")
    if value < low or (high is not None and value > high):
        rango = f"{low}..{high}" if high is not None else f">= {low}"
        raise InvalidInput(f"{name} fuera de rango ({rango}): {value}")


def check_handicap(handicap: int):
    _check_int("handicap", handicap, 0, MAX_HANDICAP)


def strokes_received(handicap: int, stroke_index: int) -> int:
    """
    Golpes de ventaja en un hoyo: uno si handicap >= HCP del hoyo,
    y un segundo si handicap >= HCP del hoyo + 18.
    """
    check_handicap(handicap)
    _check_int("stroke_index", stroke_index, 1, 18)

    received = 0
    if handicap >= stroke_index:
        received += 1
    if handicap >= stroke_index + 18:
        received += 1
    return received


def compute_net_score(gross: int, handicap: int, stroke_index: int) -> NetScore:
    _check_int("gross", gross, 1)
    received = strokes_received(handicap, stroke_index)
    # nunca por debajo de 0 (hoyo en uno con 2 golpes de ventaja)
    return NetScore(max(gross - received, 0), received)


def strokes_received_per_hole(handicap: int, holes, tee: str):
    """
    holes: lista Hole con stroke_index (por barras)
    devuelve dict {hole_number: golpes_recibidos}
    """
    return {h.number: strokes_received(handicap, h.stroke_index_for(tee)) for h in holes}
