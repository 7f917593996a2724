"""Database models for finished games."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class GameResult(Base):
    """A finished playthrough submitted to the rankings."""
    __tablename__ = "game_results"
    __table_args__ = (
        # One ranking entry per playthrough of a game
        UniqueConstraint("game_id", "playthrough", name="uq_game_results_playthrough"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(String(64), nullable=False, index=True)
    playthrough = Column(Integer, nullable=False, default=1)  # Restarts of the same game count up
    player_name = Column(String(100), nullable=False)
    role = Column(String(16), nullable=False)

    created_at = Column(DateTime, default=func.now())

    # Outcome (for quick querying)
    final_coins = Column(Integer, nullable=False, index=True)
    final_day = Column(Integer, nullable=False)
    is_win = Column(Boolean, nullable=False)
    end_reason = Column(String(32), nullable=True)
    reputation = Column(Integer, nullable=True)
    peak_price = Column(Integer, nullable=True)

    # Full summary (JSON)
    summary_json = Column(Text, nullable=False)

    def __repr__(self):
        return f"<GameResult(id={self.id}, player='{self.player_name}', coins={self.final_coins})>"
