"""basereg SDK -- Basename registration over the Herd Trails API."""

from basereg.sdk.config import RegistrarConfig
from basereg.sdk.registrar import Registrar, RegistrationResult, RegistrationState

__all__ = ["Registrar", "RegistrarConfig", "RegistrationResult", "RegistrationState"]
