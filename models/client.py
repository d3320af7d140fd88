from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, DateTime, func

from models.base import Base


class Client(Base):
    """Customer/lead record. Leads are captured from abandoned checkouts."""
    __tablename__ = 'clients'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    postal_code = Column(String, nullable=True)
    client_type = Column(String(16), nullable=False, default="lead")
    status = Column(String(16), nullable=False, default="active")
    source = Column(String(32), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=func.now())


class ClientDTO(BaseModel):
    id: int | None = None
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    client_type: str = "lead"
    status: str = "active"
    source: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
