# Driver Queue — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.driver_entry import DriverEntry, DriverStatus   # noqa
