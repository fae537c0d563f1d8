"""controle_tecnicos — Match a service address to the nearest field technician."""

from controle_tecnicos.client import TechnicianLocator
from controle_tecnicos.exceptions import (
    AddressNotProvided,
    AddressUnresolvable,
    ControleTecnicosError,
    NoTechnicianAvailable,
    RosterInvalid,
    RosterNotFound,
)
from controle_tecnicos.models import Coordinate, MatchResult

__all__ = [
    "TechnicianLocator",
    "Coordinate",
    "MatchResult",
    "ControleTecnicosError",
    "AddressNotProvided",
    "AddressUnresolvable",
    "NoTechnicianAvailable",
    "RosterNotFound",
    "RosterInvalid",
]
