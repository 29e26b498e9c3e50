"""
Declarative bases, one per store.

Only ``Base`` (the accounts store) is created by this service; the sales
and attendance schemas belong to the bots that write them.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    __allow_unmapped__ = True


class SalesBase(DeclarativeBase):
    __allow_unmapped__ = True


class AttendanceBase(DeclarativeBase):
    __allow_unmapped__ = True
