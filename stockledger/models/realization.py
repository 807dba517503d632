from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockledger.database import Base


class Realization(Base):
    """Warehouse outflow to a recipient."""

    __tablename__ = "realizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    recipient: Mapped[str] = mapped_column(String, nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="")
    total_items: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    items: Mapped[list["RealizationItem"]] = relationship(
        "RealizationItem", back_populates="realization", cascade="all, delete-orphan"
    )


class RealizationItem(Base):
    __tablename__ = "realization_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    realization_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("realizations.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    size_code: Mapped[str] = mapped_column(String, nullable=False)
    color_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("colors.id"), nullable=True)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    realization: Mapped["Realization"] = relationship("Realization", back_populates="items")
