from sqlalchemy import Column, ForeignKey, Index, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Rooms(Base):
    __tablename__ = 'rooms'

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    capacity = Column(Integer, nullable=False)

    bookings = relationship('Bookings', back_populates='room', passive_deletes=True)


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index('ix_bookings_room_date', 'room_id', 'date'),
    )

    id = Column(Text, primary_key=True)
    room_id = Column(ForeignKey('rooms.id', ondelete='CASCADE'), nullable=False)
    room_name = Column(Text, nullable=False)
    date = Column(Text, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    user_name = Column(Text, nullable=False)
    user_email = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    room = relationship('Rooms', back_populates='bookings')


class AppConfig(Base):
    __tablename__ = 'app_config'

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
