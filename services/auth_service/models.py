from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from shared.config.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


ROLES = ("customer", "admin", "rider")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    # Absent for accounts created through an external identity provider
    hashed_password = Column(String(255), nullable=True)
    google_id = Column(String(255), unique=True, nullable=True)
    role = Column(String(20), nullable=False, default="customer") # customer, admin, rider
    is_approved = Column(Boolean, nullable=False, default=False)
    phone = Column(String(50), nullable=True)
    street = Column(String(255), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(120), nullable=True)
    zip_code = Column(String(20), nullable=True)
    country = Column(String(120), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
