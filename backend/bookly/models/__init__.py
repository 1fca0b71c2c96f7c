from .tables import AppConfig, Base, Bookings, Rooms, metadata

__all__ = ["AppConfig", "Base", "Bookings", "Rooms", "metadata"]
