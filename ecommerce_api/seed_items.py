from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Product, User

PRODUCT_ROWS: Iterable[dict[str, object]] = (
    {"name": "Gaming Laptop", "description": "Intel i7, RTX 3060", "price": 15000000},
    {"name": "Mechanical Keyboard", "description": "Blue Switch, RGB", "price": 800000},
    {"name": "Wireless Mouse", "description": "Ergonomic, Silent Click", "price": 300000},
)

USER_ROWS: Iterable[dict[str, object]] = (
    {"name": "Ujang", "email": "ujang@gmail.com", "status": "Admin", "role": "Manager"},
    {"name": "Haikal", "email": "haikal@gmail.com", "status": "User", "role": "Cashier"},
    {"name": "MuZaky", "email": "muzaky@gmail.com", "status": "Moderator", "role": "Management"},
)


def seed_items(session: Session) -> None:
    """
    Insert the starter catalogue and users into empty tables.
    Tables that already hold rows are left untouched.
    """
    inserted = False

    if session.scalars(select(Product).limit(1)).first() is None:
        session.add_all(Product(**row) for row in PRODUCT_ROWS)
        inserted = True

    if session.scalars(select(User).limit(1)).first() is None:
        session.add_all(User(**row) for row in USER_ROWS)
        inserted = True

    if inserted:
        session.commit()
