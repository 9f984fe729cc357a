from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Float, Text
from datetime import datetime
import enum

from safedrive.core.config import settings
from safedrive.core.database import Base, generate_id


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class Driver(Base):
    """Monitored driver"""
    __tablename__ = "drivers"

    id = Column(String(36), primary_key=True, default=generate_id)
    driver_code = Column(String(20), unique=True, index=True, nullable=False)  # DRV-001
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=False, index=True)
    age = Column(Integer, nullable=False)
    gender = Column(SQLEnum(Gender), nullable=False)
    address = Column(Text, nullable=True)
    profile_photo = Column(String(500), nullable=True)
    date_of_birth = Column(DateTime, nullable=True)
    weight = Column(Float, nullable=True)  # kg
    height = Column(Float, nullable=True)  # cm

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def profile_photo_url(self):
        """Absolute URL for the stored photo, relative names resolve against the detection image host"""
        if not self.profile_photo:
            return None
        if self.profile_photo.startswith(("http://", "https://")):
            return self.profile_photo
        base = settings.DETECTION_IMAGE_BASE_URL.rstrip("/")
        return f"{base}/driver_images/{self.profile_photo}"

    def __repr__(self):
        return f"<Driver {self.driver_code} {self.name}>"
