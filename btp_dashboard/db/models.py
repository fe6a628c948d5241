"""ORM model definitions for the factures dashboard."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

DELETE_CASCADE = "all, delete-orphan"

UUID_STR = String(36)
FACTURE_TABLE = "facture_btp"


class User(Base, TimestampMixin):
    """Authenticated account owning facture records."""

    id: Mapped[str] = mapped_column(UUID_STR, primary_key=True, default=lambda: str(uuid4()))
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    factures: Mapped[list["Facture"]] = relationship("Facture", back_populates="user", cascade=DELETE_CASCADE)
    sessions: Mapped[list["AuthSession"]] = relationship(
        "AuthSession", back_populates="user", cascade=DELETE_CASCADE
    )


class OwnerScopedMixin(TimestampMixin):
    """Mixin for entities owned by a single user."""

    user_id: Mapped[str] = mapped_column(UUID_STR, ForeignKey("user.id", ondelete="cascade"), nullable=False, index=True)


class AuthSession(OwnerScopedMixin, Base):
    """Signed-in session; only the digest of the bearer token is stored."""

    id: Mapped[str] = mapped_column(UUID_STR, primary_key=True, default=lambda: str(uuid4()))
    token_digest: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)

    user: Mapped[User] = relationship("User", back_populates="sessions")


class Facture(OwnerScopedMixin, Base):
    """Construction invoice record, populated by an external ingestion process."""

    __tablename__ = FACTURE_TABLE

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nfacture: Mapped[str] = mapped_column(String(64), nullable=False)
    date_facture: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    quantite: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=Decimal("0"))
    montant_total: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    importe: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    url_facture: Mapped[str] = mapped_column(String(1024), nullable=False, default="")

    user: Mapped[User] = relationship("User", back_populates="factures")

    __table_args__ = (
        Index("ix_facture_importe", "user_id", "importe"),
        Index("ix_facture_date", "user_id", "date_facture"),
    )


__all__ = [
    "User",
    "AuthSession",
    "Facture",
    "FACTURE_TABLE",
]
