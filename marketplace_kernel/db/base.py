"""
Module: marketplace_kernel.db.base
Responsibility: Declarative base class for all SQLAlchemy ORM models, with
    the type annotation map that keeps column types consistent.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, or outer layers.

Invariants enforced:
    - Integer identities: project, bid and notification ids are allocated by
      SequenceService and assigned explicitly; they are never left to the
      database's autoincrement, which starts at 1 and may reuse ids.
    - int maps to BigInteger -- every amount and id fits a signed 64-bit
      column.
"""

from typing import ClassVar

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - int maps to BigInteger.
        - str maps to String(255) unless a model overrides the column type.
    """

    type_annotation_map: ClassVar[dict] = {
        int: BigInteger,
        str: String(255),
    }
