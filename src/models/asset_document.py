from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.db.database import Base
from src.models.base import TimestampMixin

if TYPE_CHECKING:
    from src.models.asset import Asset


class DocumentType(enum.Enum):
    SOAT = "SOAT"
    TECNOMECANICA = "TECNOMECANICA"
    POLIZA_TODO_RIESGO = "POLIZA_TODO_RIESGO"
    IMPUESTO_VEHICULAR = "IMPUESTO_VEHICULAR"
    TARJETA_PROPIEDAD = "TARJETA_PROPIEDAD"
    OTRO = "OTRO"


class AssetDocument(Base, TimestampMixin):
    __tablename__ = "asset_documents"

    id: Mapped[int] = mapped_column(primary_key=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), nullable=False, index=True)
    type: Mapped[DocumentType] = mapped_column(Enum(DocumentType), nullable=False)
    document_number: Mapped[Optional[str]] = mapped_column(String(100))
    expiration_date: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    asset: Mapped["Asset"] = relationship(back_populates="documents")

    def __repr__(self) -> str:
        return f"<AssetDocument {self.type.value} asset={self.asset_id}>"
