"""
Modalidades de apuesta.

Cada modalidad es una variante cerrada (discriminada por `kind`) con el
mismo contrato:

    evaluate(entries, hole, carry) -> WagerOutcome(deltas, carry)

`entries` son los (player_id, Score) del hoyo, `deltas` el dinero que gana
(+) o paga (-) cada jugador en ese hoyo. La suma de deltas de un hoyo es
siempre 0. `carry` sólo lo usan las skins con arrastre: número de skins
acumuladas que se juegan en el hoyo siguiente.
"""
from itertools import combinations
from typing import TYPE_CHECKING, Annotated, Literal, NamedTuple, Union

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .records import Score


class HoleEntry(NamedTuple):
    player_id: str
    score: "Score"


class WagerOutcome(NamedTuple):
    deltas: dict[str, float]
    carry: int = 0


def _zero(entries) -> dict[str, float]:
    return {e.player_id: 0.0 for e in entries}


def _split_pot(entries, winner_ids, stake: float) -> dict[str, float]:
    # cada perdedor paga `stake`; el bote se reparte a partes iguales
    deltas = _zero(entries)
    losers = [e.player_id for e in entries if e.player_id not in winner_ids]
    if not winner_ids or not losers:
        return deltas

    share = stake * len(losers) / len(winner_ids)
    for pid in winner_ids:
        deltas[pid] += share
    for pid in losers:
        deltas[pid] -= stake
    return deltas


def _collect_from_each(entries, collector_ids, stake: float) -> dict[str, float]:
    # cada cobrador recibe `stake` de cada uno de los demás
    deltas = _zero(entries)
    for pid in collector_ids:
        for e in entries:
            if e.player_id == pid:
                continue
            deltas[pid] += stake
            deltas[e.player_id] -= stake
    return deltas


def _lowest_net(entries) -> list[str]:
    best = min(e.score.net for e in entries)
    return [e.player_id for e in entries if e.score.net == best]


class Wager(BaseModel):
    model_config = ConfigDict(frozen=True)

    stake: float = Field(gt=0)
    label: str | None = None

    @property
    def key(self) -> str:
        return self.label or self.kind

    def evaluate(self, entries, hole, carry: int = 0) -> WagerOutcome:
        raise NotImplementedError


class StrokePlay(Wager):
    kind: Literal["stroke_play"] = "stroke_play"
    # "split": los empatados en cabeza se reparten el bote; "push": empate = nadie cobra
    tie_policy: Literal["split", "push"] = "split"

    def evaluate(self, entries, hole, carry: int = 0) -> WagerOutcome:
        winners = _lowest_net(entries)
        if len(winners) > 1 and self.tie_policy == "push":
            return WagerOutcome(_zero(entries))
        return WagerOutcome(_split_pot(entries, winners, self.stake))


class MatchPlay(Wager):
    kind: Literal["match_play"] = "match_play"
    teams: tuple[tuple[str, ...], tuple[str, ...]] | None = None

    def evaluate(self, entries, hole, carry: int = 0) -> WagerOutcome:
        deltas = _zero(entries)

        if self.teams is None:
            for a, b in combinations(entries, 2):
                if a.score.net < b.score.net:
                    deltas[a.player_id] += self.stake
                    deltas[b.player_id] -= self.stake
                elif b.score.net < a.score.net:
                    deltas[b.player_id] += self.stake
                    deltas[a.player_id] -= self.stake
            return WagerOutcome(deltas)

        # parejas: cuenta la mejor bola neta de cada equipo
        by_id = {e.player_id: e for e in entries}
        side_a = [by_id[pid] for pid in self.teams[0] if pid in by_id]
        side_b = [by_id[pid] for pid in self.teams[1] if pid in by_id]
        if not side_a or not side_b:
            return WagerOutcome(deltas)

        best_a = min(e.score.net for e in side_a)
        best_b = min(e.score.net for e in side_b)
        if best_a == best_b:
            return WagerOutcome(deltas)

        winners, losers = (side_a, side_b) if best_a < best_b else (side_b, side_a)
        for e in winners:
            deltas[e.player_id] += self.stake * len(losers)
        for e in losers:
            deltas[e.player_id] -= self.stake * len(winners)
        return WagerOutcome(deltas)


class Skins(Wager):
    kind: Literal["skins"] = "skins"
    carryover: bool = True

    def evaluate(self, entries, hole, carry: int = 0) -> WagerOutcome:
        winners = _lowest_net(entries)
        if len(winners) > 1:
            next_carry = carry + 1 if self.carryover else 0
            return WagerOutcome(_zero(entries), next_carry)

        stake = self.stake * (1 + carry)
        return WagerOutcome(_split_pot(entries, winners, stake), 0)


class ClosestToPin(Wager):
    """Oyeses: sólo en pares 3."""

    kind: Literal["closest_to_pin"] = "closest_to_pin"

    def evaluate(self, entries, hole, carry: int = 0) -> WagerOutcome:
        if hole.par != 3:
            return WagerOutcome(_zero(entries))
        flagged = [e.player_id for e in entries if e.score.closest_to_pin]
        return WagerOutcome(_split_pot(entries, flagged, self.stake))


class LongestDrive(Wager):
    kind: Literal["longest_drive"] = "longest_drive"

    def evaluate(self, entries, hole, carry: int = 0) -> WagerOutcome:
        if hole.par < 4:
            return WagerOutcome(_zero(entries))
        flagged = [e.player_id for e in entries if e.score.longest_drive]
        return WagerOutcome(_split_pot(entries, flagged, self.stake))


class BirdieBonus(Wager):
    kind: Literal["birdie_bonus"] = "birdie_bonus"

    def evaluate(self, entries, hole, carry: int = 0) -> WagerOutcome:
        birdies = [e.player_id for e in entries if e.score.gross < hole.par]
        return WagerOutcome(_collect_from_each(entries, birdies, self.stake))


class SandSave(Wager):
    kind: Literal["sand_save"] = "sand_save"

    def evaluate(self, entries, hole, carry: int = 0) -> WagerOutcome:
        saves = [
            e.player_id for e in entries
            if e.score.sand_save and e.score.gross <= hole.par
        ]
        return WagerOutcome(_collect_from_each(entries, saves, self.stake))


WagerFormat = Annotated[
    Union[StrokePlay, MatchPlay, Skins, ClosestToPin, LongestDrive, BirdieBonus, SandSave],
    Field(discriminator="kind"),
]
