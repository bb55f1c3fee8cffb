from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlmodel import Session, select

from ..infrastructure.database.tables import TraceDBModel
from ..infrastructure.database.connection import engine


class StoredTrace(BaseModel):
    """A trace produced by the evaluator, together with the program that produced it."""
    source: str
    trace: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# The Interface
class TraceRepository(ABC):
    """
    Defines how the application archives evaluator traces.
    The most recent trace is what a freshly opened visualizer shows.
    """

    @abstractmethod
    def save(self, source: str, trace: str) -> StoredTrace:
        """Archives a successful evaluator run."""
        pass

    @abstractmethod
    def latest(self) -> Optional[StoredTrace]:
        """Returns the most recently archived trace, if any."""
        pass


class InMemoryTraceRepository(TraceRepository):
    """
    Keeps traces in a list for testing/dev purposes.
    """

    def __init__(self):
        self._traces: List[StoredTrace] = []

    def save(self, source: str, trace: str) -> StoredTrace:
        stored = StoredTrace(source=source, trace=trace)
        self._traces.append(stored)
        return stored

    def latest(self) -> Optional[StoredTrace]:
        if not self._traces:
            return None
        return self._traces[-1]


class SQLTraceRepository(TraceRepository):
    """
    Reads and writes the 'traces' table.
    """

    def __init__(self, db_engine=None):
        self.engine = db_engine or engine

    def save(self, source: str, trace: str) -> StoredTrace:
        db_model = TraceDBModel(source=source, trace=trace)

        with Session(self.engine) as db:
            db.add(db_model)
            db.commit()
            db.refresh(db_model)
            return StoredTrace(
                source=db_model.source,
                trace=db_model.trace,
                created_at=db_model.created_at,
            )

    def latest(self) -> Optional[StoredTrace]:
        with Session(self.engine) as db:
            statement = select(TraceDBModel).order_by(TraceDBModel.id.desc())
            result = db.exec(statement).first()

            if not result:
                return None

            return StoredTrace(
                source=result.source,
                trace=result.trace,
                created_at=result.created_at,
            )
