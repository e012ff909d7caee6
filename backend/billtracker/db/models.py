# billtracker/db/models.py: User, Bill, Category and the Notification ledger
from sqlalchemy import Column, Integer, String, DateTime, func, Numeric, Text, Date, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from .base import Base
import enum


class BillStatus(enum.Enum):
    pending = "pending"
    paid = "paid"


class NotificationChannel(enum.Enum):
    email = "email"
    sms = "sms"
    push = "push"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    notification_email = Column(String(255), nullable=True)
    notification_days_before = Column(Integer, nullable=False, default=3)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    # relationships
    bills = relationship("Bill", back_populates="user", cascade="all, delete-orphan")
    categories = relationship("Category", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")


class Bill(Base):
    __tablename__ = "bills"
    __table_args__ = (
        Index("ix_bills_user_due_date", "user_id", "due_date"),
        Index("ix_bills_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String(120), nullable=False)
    category = Column(String(120), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(Enum(BillStatus), nullable=False, default=BillStatus.pending)
    paid_at = Column(DateTime, nullable=True)

    # stored filename (inside the file store) + original name shown to the user
    invoice_file = Column(String(255), nullable=True)
    invoice_filename = Column(String(255), nullable=True)
    proof_file = Column(String(255), nullable=True)
    proof_filename = Column(String(255), nullable=True)

    payment_instructions = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="bills")


class Category(Base):
    __tablename__ = "categories"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    color = Column(String(7), nullable=False, default="#3b82f6")
    icon = Column(String(16), nullable=False, default="📁")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="categories")


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_user_sent_at", "user_id", "sent_at"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    bill_id = Column(Integer, ForeignKey("bills.id", ondelete="SET NULL"), nullable=True, index=True)
    channel = Column(Enum(NotificationChannel), nullable=False, default=NotificationChannel.email)
    message = Column(String(500), nullable=False)
    sent_at = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="notifications")
