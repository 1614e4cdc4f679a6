"""
Declarative base and shared model columns.
"""
from sqlalchemy import Column, Integer, DateTime, LargeBinary
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

# Plain BLOB caps at 64 KB on MySQL; images need LONGBLOB there
ImageBlob = LargeBinary().with_variant(mysql.LONGBLOB(), "mysql")


class BaseModel(Base):
    """Abstract model with surrogate key and audit timestamps."""
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
