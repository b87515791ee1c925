from sqlalchemy import Column, Integer, String, DateTime

from ..db import Base
from ..utils.timeutils import utcnow


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(1000), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
