import logging
from datetime import datetime

from sqlalchemy.orm import Session

from . import models, records, rounds, schemas
from .betting import compute_hole_betting, running_settlement, settle_round
from .exceptions import IncompleteData, InvalidInput
from .golf_calc import check_handicap
from .wagers import Skins

logger = logging.getLogger(__name__)


#---------------------------------------------------------------------------------
# ------------------------------------ Course ------------------------------------
# --------------------------------------------------------------------------------

def get_courses(db: Session):
    return db.query(models.Course).order_by(models.Course.name).all()

def get_course(db: Session, course_id: int):
    return db.query(models.Course).filter(models.Course.id == course_id).first()

def create_course(db: Session, data: schemas.CourseCreate):
    # validar antes de escribir nada
    _check_hole_numbers(data.holes)

    c = models.Course(name=data.name, city=data.city)
    db.add(c)
    db.flush()
    for h in data.holes:
        db.add(models.Hole(course_id=c.id, **h.model_dump()))
    db.commit()
    db.refresh(c)
    return c

def delete_course(db: Session, course_id: int):
    c = get_course(db, course_id)
    if not c:
        return False
    db.delete(c)
    db.commit()
    return True


#---------------------------------------------------------------------------------
# ------------------------------------- Holes ------------------------------------
# --------------------------------------------------------------------------------

def get_holes_for_course(db: Session, course_id: int):
    return (
        db.query(models.Hole)
        .filter(models.Hole.course_id == course_id)
        .order_by(models.Hole.number)
        .all()
    )

def _check_hole_numbers(holes_data):
    numbers = [h.number for h in holes_data]
    if len(set(numbers)) != len(numbers):
        raise InvalidInput(f"Hoyos repetidos: {sorted(numbers)}")

def upsert_holes_for_course(db: Session, course_id: int, holes_data):
    _check_hole_numbers(holes_data)

    # borramos y reinsertamos todos los hoyos del campo
    db.query(models.Hole).filter(models.Hole.course_id == course_id).delete()

    for h in holes_data:
        hole = models.Hole(course_id=course_id, **h.model_dump())
        db.add(hole)

    db.commit()
    return get_holes_for_course(db, course_id)

def hole_table_for(course):
    if course is None or not course.holes:
        return records.DEFAULT_HOLES
    return tuple(
        records.Hole(
            number=h.number,
            par=h.par,
            stroke_index=h.stroke_index,
            stroke_index_by_tee=h.stroke_index_by_tee or {},
            distance=h.distance,
        )
        for h in course.holes
    )


#---------------------------------------------------------------------------------
# ------------------------------------- Rounds -----------------------------------
# --------------------------------------------------------------------------------

def round_to_domain(r: models.Round) -> records.Round:
    players = []
    for rp in r.round_players:
        scores = tuple(
            records.Score(
                hole_number=hs.hole_number,
                gross=hs.gross_strokes,
                net=hs.net_strokes,
                strokes_received=hs.strokes_received,
                par=hs.par,
                stroke_index=hs.stroke_index,
                closest_to_pin=hs.closest_to_pin,
                longest_drive=hs.longest_drive,
                sand_save=hs.sand_save,
            )
            for hs in rp.hole_scores
        )
        players.append(records.Player(
            id=str(rp.id),
            name=rp.name,
            handicap=rp.handicap,
            scores=scores,
            gross_total=rp.gross_total,
            net_total=rp.net_total,
            money_balance=rp.money_balance,
        ))

    return records.Round(
        id=str(r.id),
        course=r.course_name,
        holes=r.holes,
        current_hole=r.current_hole,
        tee=r.tee,
        players=tuple(players),
        betting_options=records.BettingOptions(formats=r.betting_options),
        hole_table=tuple(h for h in hole_table_for(r.course) if h.number <= r.holes),
        completed=r.completed,
    )


def _teams_by_id(formats_json, id_by_name):
    # los equipos llegan por nombre; en BD se guardan por id de RoundPlayer
    out = []
    for f in formats_json:
        teams = f.get("teams")
        if teams:
            f = dict(f, teams=[[id_by_name[name] for name in team] for team in teams])
        out.append(f)
    return out


def create_round(db: Session, data: schemas.RoundCreate):
    course = None
    if data.course_id is not None:
        course = get_course(db, data.course_id)
        if course is None:
            raise InvalidInput(f"Campo {data.course_id} no existe")

    course_name = data.course_name or (course.name if course else "Campo por defecto")

    for p in data.players:
        check_handicap(p.handicap)

    # validamos con el motor antes de tocar la BD (ids provisionales = nombres)
    options = records.BettingOptions(formats=tuple(data.formats))
    rounds.create_round(
        course_name,
        data.holes,
        [records.Player(id=p.name, name=p.name, handicap=p.handicap) for p in data.players],
        options,
        hole_table_for(course),
        data.tee,
    )

    r = models.Round(
        course_id=course.id if course else None,
        course_name=course_name,
        holes=data.holes,
        tee=data.tee,
        current_hole=1,
        betting_options=[],
    )
    db.add(r)
    db.flush()

    id_by_name = {}
    for p in data.players:
        rp = models.RoundPlayer(round_id=r.id, name=p.name, handicap=p.handicap)
        db.add(rp)
        db.flush()
        id_by_name[p.name] = str(rp.id)

    r.betting_options = _teams_by_id(
        [f.model_dump(mode="json") for f in data.formats], id_by_name
    )
    db.commit()
    db.refresh(r)
    logger.info(f"Ronda {r.id} guardada ({course_name}, {len(data.players)} jugadores)")
    return r


def get_rounds(db: Session):
    return (
        db.query(models.Round)
        .order_by(models.Round.created_at.desc(), models.Round.id.desc())
        .all()
    )

def get_round(db: Session, round_id: int):
    return db.query(models.Round).filter(models.Round.id == round_id).first()

def get_round_player(db: Session, rp_id: int):
    return db.query(models.RoundPlayer).filter(models.RoundPlayer.id == rp_id).first()

def delete_round(db: Session, round_id: int):
    r = get_round(db, round_id)
    if not r:
        return False
    # RoundPlayer y HoleScore se borran por cascade
    db.delete(r)
    db.commit()
    return True


def save_hole_score(db: Session, r: models.Round, rp: models.RoundPlayer, hole_number: int,
                    entry: schemas.ScoreEntry):
    updated = rounds.record_score(
        round_to_domain(r),
        str(rp.id),
        hole_number,
        entry.gross,
        closest_to_pin=entry.closest_to_pin,
        longest_drive=entry.longest_drive,
        sand_save=entry.sand_save,
    )
    player = updated.player(str(rp.id))
    score = player.score_for(hole_number)

    hs = (
        db.query(models.HoleScore)
        .filter(
            models.HoleScore.round_player_id == rp.id,
            models.HoleScore.hole_number == hole_number,
        )
        .first()
    )
    if hs is None:
        hs = models.HoleScore(round_player_id=rp.id, hole_number=hole_number)
        db.add(hs)

    hs.gross_strokes = score.gross
    hs.net_strokes = score.net
    hs.strokes_received = score.strokes_received
    hs.par = score.par
    hs.stroke_index = score.stroke_index
    hs.closest_to_pin = score.closest_to_pin
    hs.longest_drive = score.longest_drive
    hs.sand_save = score.sand_save

    # guardar totales en RoundPlayer
    rp.gross_total = player.gross_total
    rp.net_total = player.net_total

    db.commit()
    db.refresh(r)
    return score


def advance_round_hole(db: Session, r: models.Round):
    updated = rounds.advance_hole(round_to_domain(r))
    r.current_hole = updated.current_hole
    db.commit()
    db.refresh(r)
    return r


def hole_betting(db: Session, r: models.Round, hole_number: int):
    dr = round_to_domain(r)
    hole = dr.hole(hole_number)
    if hole is None:
        raise InvalidInput(f"Hoyo {hole_number} fuera de la ronda (1..{dr.holes})")

    # con skins de arrastre hace falta lo acumulado en los hoyos anteriores
    running = running_settlement(dr)
    for hs in running.holes:
        if hs.hole_number == hole_number:
            return hs.deltas

    if any(isinstance(f, Skins) and f.carryover for f in dr.betting_options.formats):
        # sin los hoyos previos no se sabe cuántas skins se arrastran
        missing = [(p.id, n) for n in range(1, hole_number) for p in dr.players
                   if p.score_for(n) is None]
        if missing:
            raise IncompleteData(
                f"Skins con arrastre: faltan scores antes del hoyo {hole_number}", missing
            )

    return compute_hole_betting(dr.players, hole_number, hole, dr.betting_options)


def settlement_for_round(db: Session, r: models.Round):
    return settle_round(round_to_domain(r))


def close_round(db: Session, r: models.Round):
    closed, settlement = rounds.complete_round(round_to_domain(r))

    for rp in r.round_players:
        rp.money_balance = closed.player(str(rp.id)).money_balance

    r.completed = True
    r.completed_at = datetime.utcnow()
    db.commit()
    db.refresh(r)
    return settlement
