from sqlalchemy import Column, String, DateTime, Date, Enum as SQLEnum, Float, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from safedrive.core.database import Base, generate_id


class AttendanceStatus(str, enum.Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"
    HALF_DAY = "HALF_DAY"


class AttendanceRecord(Base):
    """One driver's attendance for one day"""
    __tablename__ = "attendance_records"

    id = Column(String(36), primary_key=True, default=generate_id)
    driver_id = Column(String(36), ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    check_in_time = Column(DateTime, nullable=True)
    check_out_time = Column(DateTime, nullable=True)
    status = Column(SQLEnum(AttendanceStatus), default=AttendanceStatus.ABSENT, nullable=False)
    working_hours = Column(Float, nullable=True)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    driver = relationship("Driver", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("driver_id", "date", name="uq_attendance_driver_date"),
    )

    def __repr__(self):
        return f"<AttendanceRecord {self.driver_id} {self.date} {self.status}>"
