"""
Database models for recorded pipeline runs.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

class PipelineRunRecord(Base):
    __tablename__ = "pipeline_runs"

    id = Column(String(36), primary_key=True)
    pipeline_name = Column(String(255), nullable=False)
    workspace = Column(Text, nullable=False)
    status = Column(String(50), default="pending")
    exit_code = Column(Integer)
    stage_count = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime)
    finished_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    results = relationship(
        "StageResultRecord",
        back_populates="run",
        order_by="StageResultRecord.stage_order",
        cascade="all, delete-orphan",
    )

class StageResultRecord(Base):
    __tablename__ = "stage_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String(36), ForeignKey("pipeline_runs.id", ondelete="CASCADE"), nullable=False)
    stage_order = Column(Integer, nullable=False)
    stage_name = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False)
    exit_code = Column(Integer, nullable=False)
    duration_millis = Column(Integer, nullable=False)
    failure = Column(String(50))
    error = Column(Text)
    started_at = Column(DateTime)
    finished_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())

    run = relationship("PipelineRunRecord", back_populates="results")
