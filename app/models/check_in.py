from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from app.database import Base


class CheckInMethod(str, PyEnum):
    QR = "qr"
    MANUAL = "manual"


class CheckIn(Base):
    __tablename__ = "check_ins"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    check_in_time = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow, index=True)
    method = Column(Enum(CheckInMethod), nullable=False, default=CheckInMethod.MANUAL)
    location_id = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    qr_token_id = Column(String, unique=True, nullable=True)  # nonce of the QR token consumed here
    recorded_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relationships
    user = relationship("User", back_populates="check_ins", foreign_keys=[user_id])
    recorded_by = relationship("User", foreign_keys=[recorded_by_id])
