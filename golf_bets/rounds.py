"""
Ciclo de vida de una ronda: in_progress -> completed.

Todas las funciones son puras: reciben un Round y devuelven uno nuevo.
El que llama es responsable de no tener dos escritores sobre la misma ronda.
"""
import logging
import os
from uuid import uuid4

from .betting import settle_round
from .exceptions import IncompleteData, InvalidInput
from .golf_calc import compute_net_score
from .records import DEFAULT_HOLES, DEFAULT_TEE, TEE_COLORS, BettingOptions, Round, Score

logger = logging.getLogger(__name__)

MAX_PLAYERS = int(os.environ.get("MAX_PLAYERS", "6"))


def create_round(
    course: str,
    holes: int,
    players,
    options: BettingOptions | None = None,
    hole_table=None,
    tee: str = DEFAULT_TEE,
    round_id: str | None = None,
) -> Round:
    if holes not in (9, 18):
        raise InvalidInput(f"Una ronda es de 9 o 18 hoyos, no de {holes}")
    if tee not in TEE_COLORS:
        raise InvalidInput(f"Barras desconocidas: {tee}")

    players = tuple(players)
    if len(players) < 2:
        raise InvalidInput("Se necesitan al menos 2 jugadores")
    if len(players) > MAX_PLAYERS:
        raise InvalidInput(f"Máximo {MAX_PLAYERS} jugadores por ronda")

    ids = [p.id for p in players]
    if len(set(ids)) != len(ids):
        raise InvalidInput("Hay jugadores repetidos en la ronda")

    hole_table = tuple(hole_table) if hole_table else DEFAULT_HOLES
    numbers = {h.number for h in hole_table}
    missing_holes = [n for n in range(1, holes + 1) if n not in numbers]
    if missing_holes:
        raise InvalidInput(f"El campo no tiene datos de los hoyos {missing_holes}")

    options = options or BettingOptions()
    labels = options.labels()
    if len(set(labels)) != len(labels):
        raise InvalidInput(f"Modalidades con la misma etiqueta: {labels}")

    for wager in options.formats:
        teams = getattr(wager, "teams", None)
        if teams is None:
            continue
        in_teams = list(teams[0]) + list(teams[1])
        if len(set(in_teams)) != len(in_teams) or not set(in_teams) <= set(ids):
            raise InvalidInput(f"Equipos no válidos para {wager.key}: {teams}")

    r = Round(
        id=round_id or uuid4().hex,
        course=course,
        holes=holes,
        tee=tee,
        players=tuple(p.model_copy(update={"scores": (), "gross_total": 0,
                                           "net_total": 0, "money_balance": 0.0})
                      for p in players),
        betting_options=options,
        hole_table=tuple(h for h in hole_table if h.number <= holes),
    )
    logger.info(f"Ronda {r.id} creada en {course}: {len(players)} jugadores, {holes} hoyos")
    return r


def _check_open(round_: Round):
    if round_.completed:
        raise InvalidInput(f"La ronda {round_.id} ya está cerrada")


def record_score(
    round_: Round,
    player_id: str,
    hole_number: int,
    gross: int,
    closest_to_pin: bool = False,
    longest_drive: bool = False,
    sand_save: bool = False,
) -> Round:
    _check_open(round_)

    player = round_.player(player_id)
    if player is None:
        raise InvalidInput(f"Jugador {player_id} no está en la ronda")
    hole = round_.hole(hole_number)
    if hole is None or hole_number > round_.holes:
        raise InvalidInput(f"Hoyo {hole_number} fuera de la ronda (1..{round_.holes})")

    stroke_index = hole.stroke_index_for(round_.tee)
    net = compute_net_score(gross, player.handicap, stroke_index)
    score = Score(
        hole_number=hole_number,
        gross=gross,
        net=net.net_score,
        strokes_received=net.strokes_received,
        par=hole.par,
        stroke_index=stroke_index,
        closest_to_pin=closest_to_pin,
        longest_drive=longest_drive,
        sand_save=sand_save,
    )

    # si ya había tarjeta para ese hoyo, se sustituye
    scores = [s for s in player.scores if s.hole_number != hole_number]
    scores.append(score)
    scores.sort(key=lambda s: s.hole_number)

    updated = player.model_copy(update={
        "scores": tuple(scores),
        "gross_total": sum(s.gross for s in scores),
        "net_total": sum(s.net for s in scores),
    })
    players = tuple(updated if p.id == player_id else p for p in round_.players)
    return round_.model_copy(update={"players": players})


def hole_is_complete(round_: Round, hole_number: int) -> bool:
    return all(p.score_for(hole_number) is not None for p in round_.players)


def advance_hole(round_: Round) -> Round:
    _check_open(round_)

    current = round_.current_hole
    if not hole_is_complete(round_, current):
        missing = [(p.id, current) for p in round_.players if p.score_for(current) is None]
        raise IncompleteData(f"Faltan scores en el hoyo {current}", missing)
    if current >= round_.holes:
        return round_
    return round_.model_copy(update={"current_hole": current + 1})


def complete_round(round_: Round):
    """
    Liquidación final. Devuelve (ronda cerrada, Settlement).
    Los balances quedan escritos en cada jugador y ya no se tocan.
    """
    _check_open(round_)

    settlement = settle_round(round_)
    players = tuple(
        p.model_copy(update={"money_balance": settlement.balances[p.id]})
        for p in round_.players
    )
    closed = round_.model_copy(update={"players": players, "completed": True})
    logger.info(f"Ronda {round_.id} cerrada: {settlement.balances}")
    return closed, settlement
