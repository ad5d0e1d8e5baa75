# Overview: Inventory tables. Only their schema matters to access control:
# they are cloned into the sandbox and receive its fixture rows.

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, Text, func

from .base import Base


class Dealership(Base):
    __tablename__ = "dealerships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    capacity = Column(Integer, nullable=True)


class Vehicle(Base):
    """Cars and motorcycles share one table; car_type / handlebar_type tell them apart."""
    __tablename__ = "vehicles"

    id = Column("vehicle_id", Integer, primary_key=True, autoincrement=True)
    make = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    color = Column(Text, nullable=True)
    year = Column(Integer, nullable=True)
    price = Column(Float, nullable=False)
    type = Column(Text, nullable=True)
    handlebar_type = Column(Text, nullable=True)
    car_type = Column(Text, nullable=True)
    is_sold = Column(Boolean, nullable=False, default=False)
    dealership_id = Column("dealerships_id", Integer, ForeignKey("dealerships.id"), nullable=True)


class Sale(Base):
    __tablename__ = "sales"

    id = Column("sale_id", Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.vehicle_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    buyer_name = Column(Text, nullable=True)
    buyer_contact = Column(Text, nullable=True)
    sale_date = Column(DateTime, nullable=False, server_default=func.current_timestamp())
