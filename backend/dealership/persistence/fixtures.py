# Overview: Sample rows written into a freshly cloned sandbox database.

from __future__ import annotations

from datetime import datetime

from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session

from ..models import Dealership, Sale, Vehicle
from ..permissions import DEFAULT_ROLE_PERMISSIONS, RoleName
from ..services import auth_service, permission_service

# Shared by every sandbox account
SANDBOX_PASSWORD = "test123"

SANDBOX_USERS = [
    # (role, username, name, email, phone)
    (RoleName.ADMIN, "testadmin", "Test Admin", "testadmin@example.com", "555-000-0000"),
    (RoleName.MANAGER, "testmanager", "Test Manager", "testmanager@example.com", "555-000-0001"),
    (RoleName.SALESPERSON, "testsales", "Test Salesperson", "testsales@example.com", "555-000-0002"),
]

SANDBOX_VEHICLES = [
    # Cars
    dict(make="Honda", model="Civic", color="Red", year=2022, price=25000, car_type="Sedan"),
    dict(make="Toyota", model="Camry", color="Blue", year=2021, price=30000, car_type="Sedan"),
    dict(make="Ford", model="F-150", color="Black", year=2023, price=45000, car_type="Truck"),
    # Motorcycles
    dict(make="Harley-Davidson", model="Street 750", color="Black", year=2022, price=8000, handlebar_type="Cruiser"),
    dict(make="Yamaha", model="YZF R1", color="Blue", year=2023, price=12000, handlebar_type="Sport"),
]


def seed_sandbox_fixtures(conn: Connection, *, bcrypt_rounds: int = auth_service.DEFAULT_BCRYPT_ROUNDS) -> None:
    """
    Seed roles, permissions, one user per role, a dealership, five vehicles
    and one sale. Runs inside the caller's transaction on ``conn``.
    """
    password_hash = auth_service.hash_password(SANDBOX_PASSWORD, bcrypt_rounds)

    with Session(bind=conn) as session:
        auth_service.create_default_roles(session)
        permission_service.initialize_permissions(session)

        users = {}
        for role, username, name, email, phone in SANDBOX_USERS:
            user = auth_service.create_user(
                session,
                role=role,
                username=username,
                password_hash=password_hash,
                name=name,
                email=email,
                phone=phone,
                is_temp_password=False,
            )
            permission_service.replace_permissions(session, user.id, DEFAULT_ROLE_PERMISSIONS[role])
            users[role] = user

        dealership = Dealership(name="Test Dealership", location="Test Location", capacity=50)
        session.add(dealership)
        session.flush()

        vehicles = [Vehicle(dealership_id=dealership.id, **spec) for spec in SANDBOX_VEHICLES]
        session.add_all(vehicles)
        session.flush()

        camry = vehicles[1]
        camry.is_sold = True
        session.add(Sale(
            vehicle_id=camry.id,
            user_id=users[RoleName.SALESPERSON].id,
            buyer_name="John Doe",
            buyer_contact="john@example.com",
            sale_date=datetime(2023, 1, 15, 14, 30),
        ))
        session.flush()
