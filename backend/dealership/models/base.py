# Overview: Declarative base shared by every table in the dealership schema.

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
