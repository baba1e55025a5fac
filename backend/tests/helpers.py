import os

os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas-con-mas-de-32-caracteres")

import unittest
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base_class import Base
from app.models import message, notification, seller, user  # noqa: F401
from app.models.message import Message
from app.models.seller import Seller
from app.models.user import User
from app.schemas.actor import Actor

BASE_TIME = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

class DatabaseTestCase(unittest.TestCase):
    """Base para pruebas con una base SQLite en memoria por test"""

    def setUp(self):
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        self.db = self.SessionLocal()

        # Un comprador y una tienda para casi todos los escenarios
        self.buyer = self.add_user("Ana Compradora", "ana@example.com")
        self.shop = self.add_seller("Frutas Don Pepe", "pepe@example.com")
        self.buyer_actor = Actor(id=self.buyer.id, kind="user")
        self.shop_actor = Actor(id=self.shop.id, kind="seller")

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def add_user(self, name: Optional[str], email: str, is_active: bool = True) -> User:
        record = User(name=name, email=email, is_active=is_active)
        self.db.add(record)
        self.db.commit()
        return record

    def add_seller(self, shop_name: Optional[str], email: str, is_active: bool = True) -> Seller:
        record = Seller(shop_name=shop_name, shop_owner_name="Pepe", email=email, is_active=is_active)
        self.db.add(record)
        self.db.commit()
        return record

    def add_message(self, user_id, seller_id, sender_type, body, minutes=0, is_read=False) -> Message:
        """Inserta un mensaje con una marca de tiempo controlada."""
        record = Message(
            user_id=user_id,
            seller_id=seller_id,
            sender_type=sender_type,
            body=body,
            is_read=is_read,
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        self.db.add(record)
        self.db.commit()
        return record

    def count(self, model, *criteria) -> int:
        return self.db.query(model).filter(*criteria).count()
