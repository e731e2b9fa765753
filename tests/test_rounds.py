import pytest

from golf_bets.betting import running_settlement, settle_round
from golf_bets.exceptions import IncompleteData, IncompleteRound, InvalidInput
from golf_bets.records import BettingOptions, Hole, Player
from golf_bets.rounds import advance_hole, complete_round, create_round, hole_is_complete, record_score
from golf_bets.wagers import MatchPlay, Skins, StrokePlay


@pytest.fixture
def players():
    return [
        Player(id="ana", name="Ana", handicap=0),
        Player(id="luis", name="Luis", handicap=18),
    ]


@pytest.fixture
def options():
    return BettingOptions(formats=(StrokePlay(stake=10), MatchPlay(stake=5)))


@pytest.fixture
def new_round(players, options):
    return create_round("Club de Campo", 9, players, options, round_id="r1")


def play_all(round_, ana=None, luis=None):
    # Ana (hcp 0) hace 4 en todos; Luis (hcp 18, un golpe por hoyo) 5 en todos
    ana = ana or {}
    luis = luis or {}
    for n in range(1, round_.holes + 1):
        round_ = record_score(round_, "ana", n, ana.get(n, 4))
        round_ = record_score(round_, "luis", n, luis.get(n, 5))
    return round_


def test_create_round_starts_in_progress(new_round):
    assert new_round.completed is False
    assert new_round.current_hole == 1
    assert len(new_round.hole_table) == 9
    assert all(p.scores == () for p in new_round.players)


@pytest.mark.parametrize("holes", [0, 10, 27])
def test_create_round_only_nine_or_eighteen(players, holes):
    with pytest.raises(InvalidInput):
        create_round("Club", holes, players)


def test_create_round_needs_two_players(players):
    with pytest.raises(InvalidInput):
        create_round("Club", 18, players[:1])


def test_create_round_rejects_unknown_tee(players):
    with pytest.raises(InvalidInput):
        create_round("Club", 18, players, tee="verdes")


def test_create_round_rejects_duplicate_labels(players):
    options = BettingOptions(formats=(StrokePlay(stake=1), StrokePlay(stake=2)))
    with pytest.raises(InvalidInput):
        create_round("Club", 18, players, options)


def test_create_round_rejects_teams_with_strangers(players):
    options = BettingOptions(formats=(MatchPlay(stake=1, teams=(("ana",), ("pepe",))),))
    with pytest.raises(InvalidInput):
        create_round("Club", 18, players, options)


def test_create_round_needs_every_hole_in_table(players):
    with pytest.raises(InvalidInput):
        create_round("Club", 9, players, hole_table=[Hole(number=1, par=4, stroke_index=1)])


def test_record_score_computes_net(new_round):
    r = record_score(new_round, "luis", 1, 5)
    score = r.player("luis").score_for(1)

    assert score.net == 4
    assert score.strokes_received == 1
    assert score.par == 4
    assert score.stroke_index == 7
    # el original no cambia
    assert new_round.player("luis").scores == ()


def test_record_score_overwrites_same_hole(new_round):
    r = record_score(new_round, "ana", 1, 7)
    r = record_score(r, "ana", 1, 4)

    ana = r.player("ana")
    assert len(ana.scores) == 1
    assert ana.gross_total == 4
    assert ana.net_total == 4


def test_record_score_uses_round_tee(players):
    table = [Hole(number=n, par=4, stroke_index=n, stroke_index_by_tee={"negras": 19 - n}) for n in range(1, 10)]
    r = create_round("Club", 9, [players[0], Player(id="pepe", name="Pepe", handicap=1)],
                     hole_table=table, tee="negras")

    r = record_score(r, "pepe", 1, 5)
    score = r.player("pepe").score_for(1)
    assert score.stroke_index == 18
    assert score.strokes_received == 0


def test_record_score_rejects_bad_input(new_round):
    with pytest.raises(InvalidInput):
        record_score(new_round, "nadie", 1, 4)
    with pytest.raises(InvalidInput):
        record_score(new_round, "ana", 10, 4)
    with pytest.raises(InvalidInput):
        record_score(new_round, "ana", 1, 0)


def test_advance_hole_requires_complete_hole(new_round):
    r = record_score(new_round, "ana", 1, 4)
    assert not hole_is_complete(r, 1)
    with pytest.raises(IncompleteData):
        advance_hole(r)

    r = record_score(r, "luis", 1, 5)
    assert hole_is_complete(r, 1)
    assert advance_hole(r).current_hole == 2


def test_settle_round_folds_all_holes(new_round):
    # hoyo 1: Luis 4 bruto = 3 neto, gana el hoyo; el resto empate a 4 neto
    r = play_all(new_round, luis={1: 4})

    settlement = settle_round(r)

    assert settlement.balances == {"ana": -15, "luis": 15}
    assert settlement.totals["ana"] == (36, 36)
    assert settlement.totals["luis"] == (44, 35)
    assert len(settlement.holes) == 9


def test_settle_round_balance_is_sum_of_hole_deltas(new_round):
    r = play_all(new_round, ana={2: 3, 5: 6}, luis={1: 4, 7: 7})

    settlement = settle_round(r)

    for pid, balance in settlement.balances.items():
        per_hole = sum(sum(hs.deltas[pid].values()) for hs in settlement.holes)
        assert balance == pytest.approx(per_hole)
    assert sum(settlement.balances.values()) == pytest.approx(0)


def test_settle_round_is_idempotent(new_round):
    r = play_all(new_round, ana={2: 3}, luis={1: 4})
    assert settle_round(r) == settle_round(r)


def test_settle_round_incomplete(new_round):
    r = play_all(new_round)
    r = r.model_copy(update={"players": (
        r.player("ana"),
        r.player("luis").model_copy(update={"scores": r.player("luis").scores[:-1]}),
    )})

    with pytest.raises(IncompleteRound) as exc:
        settle_round(r)
    assert exc.value.missing == [("luis", 9)]


def test_running_settlement_stops_at_first_gap(new_round):
    r = new_round
    for n in (1, 2, 3):
        r = record_score(r, "ana", n, 4)
        r = record_score(r, "luis", n, 4)
    r = record_score(r, "ana", 5, 4)

    settlement = running_settlement(r)

    assert [hs.hole_number for hs in settlement.holes] == [1, 2, 3]
    # Luis gana los tres hoyos con 3 neto
    assert settlement.balances == {"ana": -45, "luis": 45}


def test_skins_carry_across_the_round(players):
    r = create_round("Club", 9, players, BettingOptions(formats=(Skins(stake=1),)))
    # hoyos 1-2 empatados, el 3 lo gana Ana
    r = play_all(r, ana={3: 3})

    settlement = settle_round(r)

    assert settlement.holes[1].carries == {"skins": 2}
    assert settlement.balances == {"ana": 3, "luis": -3}


def test_complete_round_is_terminal(new_round):
    r = play_all(new_round, luis={1: 4})

    closed, settlement = complete_round(r)

    assert closed.completed is True
    assert closed.player("luis").money_balance == 15
    assert closed.player("ana").money_balance == -15
    assert settlement.balances == settle_round(r).balances

    with pytest.raises(InvalidInput):
        complete_round(closed)
    with pytest.raises(InvalidInput):
        record_score(closed, "ana", 1, 3)


def test_complete_round_with_missing_scores(new_round):
    r = record_score(new_round, "ana", 1, 4)
    with pytest.raises(IncompleteRound):
        complete_round(r)
