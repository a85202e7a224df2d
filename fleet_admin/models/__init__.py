# Fleet Admin: Database Models
# Import all models here for SQLAlchemy discovery

from fleet_admin.models.vehicle import Vehicle          # noqa
from fleet_admin.models.department import Department    # noqa
from fleet_admin.models.employee import Employee        # noqa
from fleet_admin.models.brand import Brand              # noqa
from fleet_admin.models.insurance import Insurance      # noqa
from fleet_admin.models.road_worth import RoadWorth     # noqa
from fleet_admin.models.vehicle_driver_log import VehicleDriverLog  # noqa
