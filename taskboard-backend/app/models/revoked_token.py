# File: app/models/revoked_token.py

"""
Tokens invalidated by logout.

JWTs are stateless, so logout records the token's `jti` here and the auth
dependency rejects any token listed. Rows past `expires_at` can be purged.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(64), primary_key=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
