# backend/carservice/models/tables.py

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, Text, UniqueConstraint, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Services(Base):
    __tablename__ = 'services'

    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    category = Column(Text)

    booking_services = relationship('BookingServices', back_populates='service')


class WorkingHours(Base):
    __tablename__ = 'working_hours'
    __table_args__ = (
        CheckConstraint('day_of_week BETWEEN 0 AND 6'),
    )

    day_of_week = Column(Integer, nullable=False, unique=True)  # 0 = Sunday
    open_time = Column(Text, nullable=False)   # "HH:MM:SS"
    close_time = Column(Text, nullable=False)  # "HH:MM:SS"
    is_closed = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)


class BlockedDates(Base):
    __tablename__ = 'blocked_dates'

    date = Column(Text, nullable=False, unique=True)  # "YYYY-MM-DD"
    id = Column(Integer, primary_key=True)
    reason = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class ServiceBays(Base):
    __tablename__ = 'service_bays'

    name = Column(Text, nullable=False, unique=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)

    bookings = relationship('Bookings', back_populates='bay')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index('ix_bookings_date_status', 'booking_date', 'status'),
        Index('ix_bookings_user_id', 'user_id'),
    )

    # users / vehicles are owned by other services, referenced by id only
    user_id = Column(Integer, nullable=False)
    vehicle_id = Column(Integer, nullable=False)
    service_bay_id = Column(ForeignKey('service_bays.id'))
    booking_date = Column(Text, nullable=False)  # "YYYY-MM-DD"
    start_time = Column(Text, nullable=False)    # "HH:MM:SS"
    end_time = Column(Text, nullable=False)      # "HH:MM:SS"
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    notes = Column(Text)
    cancellation_reason = Column(Text)
    cancelled_at = Column(Text)

    bay = relationship('ServiceBays', back_populates='bookings')
    line_items = relationship(
        'BookingServices',
        back_populates='booking',
        order_by='BookingServices.id',
    )


class BookingServices(Base):
    __tablename__ = 'booking_services'
    __table_args__ = (
        UniqueConstraint('booking_id', 'service_id'),
    )

    booking_id = Column(ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    booking = relationship('Bookings', back_populates='line_items')
    service = relationship('Services', back_populates='booking_services')
