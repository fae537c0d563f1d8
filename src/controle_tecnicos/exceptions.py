"""Custom exception hierarchy for controle_tecnicos."""


class ControleTecnicosError(Exception):
    """Base exception for all controle_tecnicos errors."""


class AddressNotProvided(ControleTecnicosError):
    """No service address was given."""

    def __init__(self):
        super().__init__("Service address not provided")


class AddressUnresolvable(ControleTecnicosError):
    """Every geocoding strategy failed for the service address."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Could not resolve service address: '{address}'")


class NoTechnicianAvailable(ControleTecnicosError):
    """No roster entry could be resolved to coordinates."""

    def __init__(self, roster_size: int):
        self.roster_size = roster_size
        super().__init__(
            f"No technician with a valid address ({roster_size} roster entries)"
        )


class RosterNotFound(ControleTecnicosError):
    """The roster file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Roster file not found at: {path}")


class RosterInvalid(ControleTecnicosError):
    """The roster file exists but lacks the expected address column."""

    def __init__(self, path: str, detail: str):
        self.path = path
        super().__init__(f"Invalid roster at {path}: {detail}")
