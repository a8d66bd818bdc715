"""ORM Models for SiteCalc — SQLAlchemy 2.0"""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import JSON, String, Text, Numeric, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from sitecalc.db import Base


def gen_uuid():
    return str(uuid.uuid4())


# ── PROJECTS ──────────────────────────────────────────────────────────────────
class ProjectRow(Base):
    __tablename__ = "projects"
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=gen_uuid)
    owner_id: Mapped[Optional[str]] = mapped_column(String(128), index=True)  # NULL = guest
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date_sent: Mapped[str] = mapped_column(String(64), default="")
    job_address: Mapped[str] = mapped_column(Text, default="")
    to_address: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    calculators: Mapped[list["CalculatorRow"]] = relationship(
        "CalculatorRow", back_populates="project", cascade="all, delete-orphan"
    )


# ── CALCULATORS ───────────────────────────────────────────────────────────────
# The whole estimate (sections, lines, totals) lives in ``document`` and is
# rewritten on every mutation.
class CalculatorRow(Base):
    __tablename__ = "calculators"
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=gen_uuid)
    project_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("projects.id", ondelete="CASCADE")
    )
    owner_id: Mapped[Optional[str]] = mapped_column(String(128))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    variant: Mapped[str] = mapped_column(String(32), nullable=False)
    grand_total: Mapped[float] = mapped_column(Numeric(14, 2), default=0)
    document: Mapped[dict] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    project: Mapped[Optional["ProjectRow"]] = relationship("ProjectRow", back_populates="calculators")

    __table_args__ = (Index("ix_calculators_project_owner", "project_id", "owner_id"),)


# ── PRODUCTS ──────────────────────────────────────────────────────────────────
class ProductRow(Base):
    __tablename__ = "products"
    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=gen_uuid)
    code: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    price: Mapped[float] = mapped_column(Numeric(12, 4), default=0)
