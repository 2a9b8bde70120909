"""
SQLAlchemy ORM models for persistence.
"""
from sqlalchemy import Column, Integer, Numeric, String

from db import Base
from domain.models import PRICE_PRECISION, PRICE_SCALE, TEXT_MAX_LENGTH


class BookORM(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(TEXT_MAX_LENGTH), nullable=False)
    author = Column(String(TEXT_MAX_LENGTH), nullable=False)
    price = Column(Numeric(PRICE_PRECISION, PRICE_SCALE, asdecimal=False), nullable=False)
    quantity = Column(Integer, nullable=False, default=0, server_default="0")
