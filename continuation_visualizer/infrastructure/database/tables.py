"""
Database Table Definitions.

This module defines the SQL schema using SQLModel.
We use the 'DBModel' suffix to distinguish these persistence models
from the Pydantic domain models (StoredTrace, SessionState).
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


class TraceDBModel(SQLModel, table=True):
    """
    Persistence model for evaluator traces.
    Maps 1-to-1 with the 'traces' table.
    """

    __tablename__ = "traces"

    id: Optional[int] = Field(default=None, primary_key=True)

    source: str = Field(sa_column=Column(Text, nullable=False))
    trace: str = Field(sa_column=Column(Text, nullable=False))

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
