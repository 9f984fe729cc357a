from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from safedrive.core.database import Base, generate_id


class StressLevel(str, enum.Enum):
    NORMAL = "NORMAL"
    MILD = "MILD"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class RiskLevel(str, enum.Enum):
    NORMAL = "NORMAL"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class HealthReport(Base):
    """Blood pressure, heart rate and stress reading taken for a driver"""
    __tablename__ = "health_reports"

    id = Column(String(36), primary_key=True, default=generate_id)
    driver_id = Column(String(36), ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True)
    report_date = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    blood_pressure_high = Column(Integer, nullable=True)  # systolic, mmHg
    blood_pressure_low = Column(Integer, nullable=True)  # diastolic, mmHg
    heart_rate = Column(Integer, nullable=True)  # bpm
    stress_level = Column(SQLEnum(StressLevel), nullable=True)
    risk_level = Column(SQLEnum(RiskLevel), default=RiskLevel.NORMAL, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    driver = relationship("Driver", lazy="selectin")

    __table_args__ = (
        Index("ix_health_reports_driver_date", "driver_id", "report_date"),
    )

    def __repr__(self):
        return f"<HealthReport {self.driver_id} {self.risk_level}>"
