import os
import tempfile
from pathlib import Path

import pytest

# db.py exige DATABASE_URL al importarse
_tmp_dir = tempfile.mkdtemp(prefix="golf_bets_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_tmp_dir) / 'test.db'}"

from golf_bets.golf_calc import compute_net_score  # noqa: E402
from golf_bets.records import DEFAULT_HOLES, Hole, Player, Score  # noqa: E402


@pytest.fixture
def make_player():
    """Jugador con tarjeta ya calculada: make_player("a", 10, {1: 5}, holes)."""

    def _make(player_id, handicap, grosses, holes=DEFAULT_HOLES, **flags_by_hole):
        by_number = {h.number: h for h in holes}
        scores = []
        for number, gross in sorted(grosses.items()):
            hole = by_number[number]
            net = compute_net_score(gross, handicap, hole.stroke_index)
            flags = flags_by_hole.get(f"hole{number}", {})
            scores.append(Score(
                hole_number=number,
                gross=gross,
                net=net.net_score,
                strokes_received=net.strokes_received,
                par=hole.par,
                stroke_index=hole.stroke_index,
                **flags,
            ))
        return Player(
            id=player_id,
            name=player_id.upper(),
            handicap=handicap,
            scores=tuple(scores),
            gross_total=sum(s.gross for s in scores),
            net_total=sum(s.net for s in scores),
        )

    return _make


@pytest.fixture
def par3():
    return Hole(number=2, par=3, stroke_index=13)


@pytest.fixture
def par4():
    return Hole(number=1, par=4, stroke_index=7)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from golf_bets.db import Base, engine
    from golf_bets.main import app

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c
    Base.metadata.drop_all(bind=engine)
