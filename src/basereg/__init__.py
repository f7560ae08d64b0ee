"""basereg -- Basename registration through the Herd Trails API.

Top-level convenience re-exports::

    from basereg import Registrar, RegistrarConfig
    from basereg.protocol import ExecutionRef  # wire types
"""

__version__ = "0.1.0"

from basereg.sdk.config import RegistrarConfig
from basereg.sdk.registrar import Registrar, RegistrationResult, RegistrationState

__all__ = [
    "__version__",
    "Registrar",
    "RegistrarConfig",
    "RegistrationResult",
    "RegistrationState",
]
