"""
SQLAlchemy models, all exported so Alembic can detect them.
"""

from vaxsync.models.barangay import Barangay
from vaxsync.models.vaccine import Vaccine
from vaxsync.models.inventory import BarangayVaccineInventory, InventoryMovement, MovementType
from vaxsync.models.vaccination_session import VaccinationSession, SessionStatus
