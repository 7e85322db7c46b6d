"""
Sequence counter database model.
"""

from sqlalchemy import Column, Integer, String
from fuelwale.app.db.session import Base


class TripSequence(Base):
    """
    Named counter advanced with an atomic `UPDATE ... RETURNING`.

    The "trip_serial" row holds the last global trip serial handed out.
    """
    __tablename__ = "trip_sequences"

    name = Column(String(50), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<TripSequence(name='{self.name}', last_value={self.last_value})>"
