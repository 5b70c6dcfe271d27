"""SQLAlchemy models for hangarledger database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Integer,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Aircraft(Base):
    """Aircraft model."""

    __tablename__ = "aircraft"

    id = Column(String(36), primary_key=True, default=_new_id)
    tail_number = Column(String, nullable=False)
    name = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    trips = relationship("Trip", back_populates="aircraft_ref")


class Vendor(Base):
    """Vendor model."""

    __tablename__ = "vendors"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)


class ExpenseCategory(Base):
    """Expense category model."""

    __tablename__ = "expense_categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    is_fuel_category = Column(Boolean, default=False, nullable=False)
    is_system = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)


class PaymentMethod(Base):
    """Payment method model."""

    __tablename__ = "payment_methods"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)


class Trip(Base):
    """Trip model.

    ``aircraft`` holds the tail number, denormalized for display.
    """

    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=_new_id)
    aircraft_id = Column(String(36), ForeignKey("aircraft.id"), nullable=True)
    trip_number = Column(String, nullable=True)
    name = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    aircraft = Column(String, nullable=False, default="")
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    aircraft_ref = relationship("Aircraft", back_populates="trips")
    expenses = relationship("Expense", back_populates="trip")


class Expense(Base):
    """Expense model."""

    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=_new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=True)
    vendor_id = Column(String(36), ForeignKey("vendors.id"), nullable=True)
    payment_method_id = Column(String(36), ForeignKey("payment_methods.id"), nullable=True)
    category_id = Column(String(36), ForeignKey("expense_categories.id"), nullable=True)
    date = Column(Date, nullable=False)
    vendor = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False)
    payment_method = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    trip = relationship("Trip", back_populates="expenses")
    line_items = relationship("ExpenseLineItem", back_populates="expense")
    receipts = relationship("Receipt", back_populates="expense")


class ExpenseLineItem(Base):
    """Expense line item model."""

    __tablename__ = "expense_line_items"

    id = Column(String(36), primary_key=True, default=_new_id)
    expense_id = Column(String(36), ForeignKey("expenses.id"), nullable=False)
    category_id = Column(String(36), ForeignKey("expense_categories.id"), nullable=True)
    description = Column(String, nullable=True)
    category = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    quantity_gallons = Column(Numeric(12, 3), nullable=True)
    sort_order = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    expense = relationship("Expense", back_populates="line_items")


class Receipt(Base):
    """Receipt metadata model; file bytes live in the blob store."""

    __tablename__ = "receipts"

    id = Column(String(36), primary_key=True, default=_new_id)
    expense_id = Column(String(36), ForeignKey("expenses.id"), nullable=False)
    storage_path = Column(String, nullable=False)
    original_filename = Column(String, nullable=True)
    uploaded_at = Column(DateTime, default=_now, nullable=False)

    expense = relationship("Expense", back_populates="receipts")


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory.

    SQLite connections get foreign key enforcement switched on, so rows
    pointing at a missing parent are rejected.
    """
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
