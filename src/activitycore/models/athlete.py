"""Athlete heart-rate profile used for relative effort."""
from typing import Optional

from sqlmodel import Field, SQLModel


class AthleteProfile(SQLModel, table=True):
    user_id: int = Field(primary_key=True)
    max_heart_rate: Optional[int] = None
    rest_heart_rate: Optional[int] = None
