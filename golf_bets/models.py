from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .db import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    city = Column(String, nullable=True)

    holes = relationship(
        "Hole",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Hole.number"
    )

    rounds = relationship("Round", back_populates="course")

    @property
    def par_total(self):
        return sum(h.par for h in self.holes)


class Hole(Base):
    __tablename__ = "holes"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)

    number = Column(Integer, nullable=False)          # 1..18
    par = Column(Integer, nullable=False)             # 3/4/5
    stroke_index = Column(Integer, nullable=False)    # HCP hoyo 1..18
    stroke_index_by_tee = Column(JSON, nullable=False, default=dict)  # {"negras": 5, ...}
    distance = Column(Integer, nullable=True)

    course = relationship("Course", back_populates="holes")


class Round(Base):
    __tablename__ = "rounds"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=True)
    course_name = Column(String, nullable=False)
    holes = Column(Integer, nullable=False, default=18)
    tee = Column(String, nullable=False, default="blancas")
    current_hole = Column(Integer, nullable=False, default=1)

    # lista de modalidades tal cual llega en la API (kind, stake, ...)
    betting_options = Column(JSON, nullable=False, default=list)

    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    course = relationship("Course", back_populates="rounds")

    round_players = relationship(
        "RoundPlayer",
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="RoundPlayer.id"
    )


class RoundPlayer(Base):
    __tablename__ = "round_players"

    id = Column(Integer, primary_key=True, index=True)
    round_id = Column(Integer, ForeignKey("rounds.id"), nullable=False)

    name = Column(String, nullable=False)
    handicap = Column(Integer, nullable=False)

    gross_total = Column(Integer, nullable=False, default=0)
    net_total = Column(Integer, nullable=False, default=0)
    money_balance = Column(Float, nullable=False, default=0.0)

    round = relationship("Round", back_populates="round_players")

    hole_scores = relationship(
        "HoleScore",
        back_populates="round_player",
        cascade="all, delete-orphan",
        order_by="HoleScore.hole_number"
    )


class HoleScore(Base):
    __tablename__ = "hole_scores"
    __table_args__ = (
        UniqueConstraint("round_player_id", "hole_number", name="uq_score_player_hole"),
    )

    id = Column(Integer, primary_key=True, index=True)

    round_player_id = Column(Integer, ForeignKey("round_players.id"), nullable=False)
    hole_number = Column(Integer, nullable=False)  # 1..18

    gross_strokes = Column(Integer, nullable=False)  # golpes brutos
    net_strokes = Column(Integer, nullable=False)    # calculado
    strokes_received = Column(Integer, nullable=False, default=0)
    par = Column(Integer, nullable=False)
    stroke_index = Column(Integer, nullable=False)

    closest_to_pin = Column(Boolean, default=False, nullable=False)
    longest_drive = Column(Boolean, default=False, nullable=False)
    sand_save = Column(Boolean, default=False, nullable=False)

    round_player = relationship("RoundPlayer", back_populates="hole_scores")
