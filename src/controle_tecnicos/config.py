"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from controle_tecnicos.providers import NOMINATIM_BASE, PHOTON_BASE
from controle_tecnicos.roster import ADDRESS_FIELD
from controle_tecnicos.routing import OSRM_BASE

DEFAULT_PORT = 3000
DEFAULT_USER_AGENT = "controle-tecnicos/1.0 (contato: suporte@delfia.tech)"


@dataclass(frozen=True)
class Settings:
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    roster_path: Path = Path("tecnicos.csv")
    roster_address_field: str = ADDRESS_FIELD
    nominatim_url: str = NOMINATIM_BASE
    photon_url: str = PHOTON_BASE
    osrm_url: str = OSRM_BASE
    user_agent: str = DEFAULT_USER_AGENT
    http_timeout: Optional[float] = None     # None: wait for upstream indefinitely
    rate_limit_retries: int = 1
    rate_limit_delay: float = 1.0
    static_dir: Path = Path("../frontend")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """
        Build settings from *environ* (defaults to ``os.environ``).

        Unset variables keep their defaults; a relative roster path is
        resolved against the current working directory.
        """
        env = os.environ if environ is None else environ
        timeout = env.get("HTTP_TIMEOUT")
        return cls(
            port=int(env.get("PORT", DEFAULT_PORT)),
            host=env.get("HOST", cls.host),
            roster_path=Path(env.get("TECNICOS_CSV", str(Path.cwd() / "tecnicos.csv"))),
            roster_address_field=env.get("ROSTER_ADDRESS_FIELD", ADDRESS_FIELD),
            nominatim_url=env.get("NOMINATIM_URL", NOMINATIM_BASE),
            photon_url=env.get("PHOTON_URL", PHOTON_BASE),
            osrm_url=env.get("OSRM_URL", OSRM_BASE),
            user_agent=env.get("GEOCODER_USER_AGENT", DEFAULT_USER_AGENT),
            http_timeout=float(timeout) if timeout else None,
            rate_limit_retries=int(env.get("RATE_LIMIT_RETRIES", 1)),
            rate_limit_delay=float(env.get("RATE_LIMIT_DELAY", 1.0)),
            static_dir=Path(env.get("STATIC_DIR", cls.static_dir)),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
