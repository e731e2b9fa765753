"""
Liquidación de apuestas.

- compute_hole_betting: deltas de un hoyo, por modalidad.
- settle_round: pliegue puro de todos los hoyos -> balance final por jugador.
- running_settlement: lo mismo pero sólo con los hoyos ya completos
  (para ir mostrando cómo va la partida).
"""
import logging
from collections import defaultdict
from typing import NamedTuple

from .exceptions import IncompleteData, IncompleteRound
from .wagers import HoleEntry

logger = logging.getLogger(__name__)


class HoleSettlement(NamedTuple):
    hole_number: int
    # {player_id: {modalidad: delta}}
    deltas: dict[str, dict[str, float]]
    # skins acumuladas que pasan al hoyo siguiente, por modalidad
    carries: dict[str, int]


class RoundTotals(NamedTuple):
    gross: int
    net: int


class Settlement(NamedTuple):
    balances: dict[str, float]
    totals: dict[str, RoundTotals]
    holes: list[HoleSettlement]


def _missing_scores(players, hole_number: int) -> list[tuple[str, int]]:
    return [(p.id, hole_number) for p in players if p.score_for(hole_number) is None]


def evaluate_hole(players, hole_number: int, hole, options, carries=None) -> HoleSettlement:
    missing = _missing_scores(players, hole_number)
    if missing:
        raise IncompleteData(
            f"Faltan scores en el hoyo {hole_number}: "
            + ", ".join(pid for pid, _ in missing),
            missing,
        )

    carries = carries or {}
    if len(players) < 2:
        return HoleSettlement(hole_number, {}, {})

    entries = [HoleEntry(p.id, p.score_for(hole_number)) for p in players]
    deltas = {p.id: {} for p in players}
    next_carries = {}

    for wager in options.formats:
        outcome = wager.evaluate(entries, hole, carries.get(wager.key, 0))
        for pid, amount in outcome.deltas.items():
            deltas[pid][wager.key] = amount
        next_carries[wager.key] = outcome.carry

    return HoleSettlement(hole_number, deltas, next_carries)


def compute_hole_betting(players, hole_number: int, hole, options, carries=None):
    return evaluate_hole(players, hole_number, hole, options, carries).deltas


def _fold(round_, hole_numbers) -> Settlement:
    balances = {p.id: 0.0 for p in round_.players}
    carries = {}
    holes = []

    for n in hole_numbers:
        hs = evaluate_hole(round_.players, n, round_.hole(n), round_.betting_options, carries)
        for pid, by_format in hs.deltas.items():
            balances[pid] += sum(by_format.values())
        carries = hs.carries
        holes.append(hs)

    totals = {}
    for p in round_.players:
        played = [p.score_for(n) for n in hole_numbers]
        totals[p.id] = RoundTotals(
            gross=sum(s.gross for s in played),
            net=sum(s.net for s in played),
        )

    pending = {k: v for k, v in carries.items() if v}
    if pending:
        logger.debug(f"Ronda {round_.id}: skins sin resolver al final {pending}")

    return Settlement(balances, totals, holes)


def settle_round(round_) -> Settlement:
    missing = []
    for n in range(1, round_.holes + 1):
        missing.extend(_missing_scores(round_.players, n))
    if missing:
        raise IncompleteRound(
            f"La ronda {round_.id} tiene {len(missing)} scores pendientes",
            missing,
        )

    settlement = _fold(round_, range(1, round_.holes + 1))
    logger.debug(f"Ronda {round_.id} liquidada: {settlement.balances}")
    return settlement


def running_settlement(round_) -> Settlement:
    """Liquida los hoyos completos consecutivos desde el 1."""
    played = []
    for n in range(1, round_.holes + 1):
        if _missing_scores(round_.players, n):
            break
        played.append(n)
    return _fold(round_, played)


def pot_by_format(settlement: Settlement) -> dict[str, float]:
    """Dinero que ha cambiado de manos en cada modalidad durante la ronda."""
    by_format = defaultdict(float)
    for hs in settlement.holes:
        for by_player in hs.deltas.values():
            for key, amount in by_player.items():
                by_format[key] += abs(amount)
    return {k: v / 2 for k, v in by_format.items()}
