from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime

from safedrive.models.driver import Gender


class DriverCreate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[Gender] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    profile_photo: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    weight: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)


class DriverUpdate(BaseModel):
    """Partial update; only fields that were sent are applied"""
    name: Optional[str] = None
    phone: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[Gender] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    profile_photo: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    weight: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)


class DriverResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    driver_code: str
    name: str
    email: Optional[str] = None
    phone: str
    age: int
    gender: Gender
    address: Optional[str] = None
    profile_photo: Optional[str] = None
    profile_photo_url: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class DriverStats(BaseModel):
    total: int
    male: int
    female: int
    other: int


class VitalsPayload(BaseModel):
    """Latest readings from the in-cab sensors, keyed like HEALTH_THRESHOLDS"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    heartRate: Optional[float] = None
    breathingRate: Optional[float] = None
    hrvSDNN: Optional[float] = None
    oxygenSaturation: Optional[float] = None
    meanRRI: Optional[float] = None
    parasympathetic: Optional[float] = None
    snsIndex: Optional[float] = None
    alcoholDetection: Optional[bool] = Field(None, validation_alias=AliasChoices("alcoholDetection", "alcoholDetected"))
    drowsinessDetection: Optional[bool] = Field(
        None, validation_alias=AliasChoices("drowsinessDetection", "drowsinessDetected")
    )
