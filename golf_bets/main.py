import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import crud, schemas
from .betting import pot_by_format
from .db import get_db, init_db
from .exceptions import IncompleteData, IncompleteRound, InvalidInput
from .golf_calc import compute_net_score
from .logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="Golf Bets")


# ================================================================================
# ================================== ERRORES =====================================
# ================================================================================

@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=422, content={"error": "invalid_input", "detail": exc.message})


@app.exception_handler(IncompleteData)
async def incomplete_data_handler(request: Request, exc: IncompleteData):
    # IncompleteRound hereda de IncompleteData
    logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=409,
        content={
            "error": "incomplete_round" if isinstance(exc, IncompleteRound) else "incomplete_data",
            "detail": exc.message,
            "missing": [{"player_id": pid, "hole_number": n} for pid, n in exc.missing],
        },
    )


def _round_or_404(db: Session, round_id: int):
    r = crud.get_round(db, round_id)
    if not r:
        raise HTTPException(status_code=404, detail="Ronda no encontrada")
    return r


def _course_payload(c):
    return {
        "id": c.id,
        "name": c.name,
        "city": c.city,
        "par_total": c.par_total,
        "holes": [
            {
                "number": h.number,
                "par": h.par,
                "stroke_index": h.stroke_index,
                "stroke_index_by_tee": h.stroke_index_by_tee or {},
                "distance": h.distance,
            }
            for h in c.holes
        ],
    }


def _round_payload(r):
    dr = crud.round_to_domain(r)
    return {
        "id": r.id,
        "course": dr.course,
        "holes": dr.holes,
        "tee": dr.tee,
        "current_hole": dr.current_hole,
        "completed": dr.completed,
        "betting_options": [f.model_dump(mode="json") for f in dr.betting_options.formats],
        "players": [
            {
                "id": p.id,
                "name": p.name,
                "handicap": p.handicap,
                "gross_total": p.gross_total,
                "net_total": p.net_total,
                "money_balance": p.money_balance,
                "scores": [s.model_dump() for s in p.scores],
            }
            for p in dr.players
        ],
    }


def _settlement_payload(settlement):
    return {
        "balances": settlement.balances,
        "totals": {pid: t._asdict() for pid, t in settlement.totals.items()},
        "pot_by_format": pot_by_format(settlement),
        "holes": [
            {"hole_number": hs.hole_number, "deltas": hs.deltas, "carries": hs.carries}
            for hs in settlement.holes
        ],
    }


# ---------------------------------------------------------------------------------

@app.get("/calc/net-score")
def net_score(gross: int, handicap: int, stroke_index: int):
    result = compute_net_score(gross, handicap, stroke_index)
    return result._asdict()


# ================================================================================
# =================================== CAMPOS =====================================
# ================================================================================

@app.get("/courses")
def courses_list(db: Session = Depends(get_db)):
    return [_course_payload(c) for c in crud.get_courses(db)]


@app.post("/courses", status_code=201)
def course_create(data: schemas.CourseCreate, db: Session = Depends(get_db)):
    c = crud.create_course(db, data)
    return _course_payload(c)


@app.get("/courses/{course_id}")
def course_detail(course_id: int, db: Session = Depends(get_db)):
    c = crud.get_course(db, course_id)
    if not c:
        raise HTTPException(status_code=404, detail="Campo no encontrado")
    return _course_payload(c)


@app.put("/courses/{course_id}/holes")
def course_holes_update(course_id: int, holes: list[schemas.HoleCreate], db: Session = Depends(get_db)):
    c = crud.get_course(db, course_id)
    if not c:
        raise HTTPException(status_code=404, detail="Campo no encontrado")
    crud.upsert_holes_for_course(db, course_id, holes)
    db.refresh(c)
    return _course_payload(c)


@app.delete("/courses/{course_id}", status_code=204)
def course_delete(course_id: int, db: Session = Depends(get_db)):
    if not crud.delete_course(db, course_id):
        raise HTTPException(status_code=404, detail="Campo no encontrado")


# ================================================================================
# =================================== RONDAS =====================================
# ================================================================================

@app.get("/rounds")
def rounds_list(db: Session = Depends(get_db)):
    return [_round_payload(r) for r in crud.get_rounds(db)]


@app.post("/rounds", status_code=201)
def round_create(data: schemas.RoundCreate, db: Session = Depends(get_db)):
    r = crud.create_round(db, data)
    return _round_payload(r)


@app.get("/rounds/{round_id}")
def round_detail(round_id: int, db: Session = Depends(get_db)):
    return _round_payload(_round_or_404(db, round_id))


@app.delete("/rounds/{round_id}", status_code=204)
def round_delete(round_id: int, db: Session = Depends(get_db)):
    if not crud.delete_round(db, round_id):
        raise HTTPException(status_code=404, detail="Ronda no encontrada")


@app.put("/rounds/{round_id}/players/{rp_id}/holes/{hole_number}")
def round_score_entry(
    round_id: int,
    rp_id: int,
    hole_number: int,
    entry: schemas.ScoreEntry,
    db: Session = Depends(get_db),
):
    r = _round_or_404(db, round_id)
    rp = crud.get_round_player(db, rp_id)
    if not rp or rp.round_id != r.id:
        raise HTTPException(status_code=404, detail="Jugador no encontrado en la ronda")

    score = crud.save_hole_score(db, r, rp, hole_number, entry)
    return score.model_dump()


@app.post("/rounds/{round_id}/advance")
def round_advance(round_id: int, db: Session = Depends(get_db)):
    r = crud.advance_round_hole(db, _round_or_404(db, round_id))
    return {"current_hole": r.current_hole}


@app.get("/rounds/{round_id}/holes/{hole_number}/betting")
def round_hole_betting(round_id: int, hole_number: int, db: Session = Depends(get_db)):
    r = _round_or_404(db, round_id)
    return {"hole_number": hole_number, "deltas": crud.hole_betting(db, r, hole_number)}


@app.get("/rounds/{round_id}/settlement")
def round_settlement(round_id: int, db: Session = Depends(get_db)):
    r = _round_or_404(db, round_id)
    return _settlement_payload(crud.settlement_for_round(db, r))


@app.post("/rounds/{round_id}/complete")
def round_complete(round_id: int, db: Session = Depends(get_db)):
    r = _round_or_404(db, round_id)
    settlement = crud.close_round(db, r)
    return _settlement_payload(settlement)


# ---------------------------------------------------------------------------


@app.get("/health")
def health():
    return {"status": "ok"}
