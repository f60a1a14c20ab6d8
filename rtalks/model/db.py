from sqlalchemy.orm import declarative_base
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    func,
)


Base = declarative_base()

# order status values; no DB-level enum
STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"


# ----------------------------
# ORM models
# ----------------------------
class Event(Base):
    __tablename__ = "events"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    date = Column(Date, nullable=False)
    time = Column(Time, nullable=False)
    location = Column(String(255))
    price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Stats(Base):
    __tablename__ = "stats"
    id = Column(Integer, primary_key=True, autoincrement=True)
    attendees = Column(Integer, default=0)
    partners = Column(Integer, default=0)
    speakers = Column(Integer, default=0)
    updated_at = Column(DateTime, server_default=func.now())


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(20), nullable=False)
    package_name = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)

    # pending | completed
    status = Column(String(50), nullable=False, default=STATUS_PENDING)
    # payment link id first, provider payment id once paid
    payment_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_orders_status", "status"),
        Index("idx_orders_created_at", "created_at"),
        Index("idx_orders_email", "customer_email"),
    )


class Admin(Base):
    __tablename__ = "admins"
    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class SiteContent(Base):
    __tablename__ = "site_content"
    id = Column(Integer, primary_key=True, autoincrement=True)
    section = Column(String(100), nullable=False, unique=True)
    title = Column(String(500))
    subtitle = Column(String(500))
    description = Column(Text)
    content_data = Column(JSON)
    updated_at = Column(DateTime, server_default=func.now())


class Package(Base):
    __tablename__ = "event_packages"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    category = Column(String(255))
    price = Column(Numeric(10, 2), nullable=False)
    features = Column(JSON)
    package_type = Column(String(50), nullable=False)
    display_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_event_packages_active", "is_active"),
        Index("idx_event_packages_order", "display_order"),
    )


class Speaker(Base):
    __tablename__ = "speakers"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    title = Column(String(255))
    company = Column(String(255))
    bio = Column(Text)
    image_url = Column(String(500))
    display_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_speakers_active", "is_active"),
        Index("idx_speakers_order", "display_order"),
    )


class ContactForm(Base):
    __tablename__ = "contact_forms"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_contact_forms_created_at", "created_at"),
    )


class ContactInfo(Base):
    __tablename__ = "contact_info"
    id = Column(Integer, primary_key=True, autoincrement=True)
    section = Column(String(50), nullable=False, unique=True)
    phone_numbers = Column(JSON)
    email = Column(String(255))
    location = Column(JSON)
    updated_at = Column(DateTime, server_default=func.now())


async def create_schema(conn) -> None:
    await conn.run_sync(Base.metadata.create_all)
