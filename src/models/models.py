from sqlalchemy import Column, String, DateTime, Text, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Blob(Base):
    __tablename__ = 'blob'

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
