"""
Technician Matcher — Interactive CLI
===================================
Thin wrapper around the controle_tecnicos library.

Usage:
    controle-tecnicos                                  # interactive mode
    controle-tecnicos "Rua X 10, Campinas - SP"        # single lookup

Settings are read from environment variables (see config.Settings):
    TECNICOS_CSV   Path to the roster CSV (default: ./tecnicos.csv)
    LOG_LEVEL      Logging level (default: INFO)
"""

import logging
import sys

from controle_tecnicos import TechnicianLocator
from controle_tecnicos.config import Settings
from controle_tecnicos.exceptions import (
    AddressNotProvided,
    AddressUnresolvable,
    ControleTecnicosError,
    NoTechnicianAvailable,
    RosterInvalid,
    RosterNotFound,
)

_BANNER = """\
╔══════════════════════════════════════╗
║        Technician Matcher            ║
║  Service address → nearest tech      ║
╚══════════════════════════════════════╝
Type 'q' to quit.
"""


def _run_interactive(locator: TechnicianLocator) -> None:
    print(_BANNER)

    while True:
        try:
            raw_address = input("\nService address: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            break

        if raw_address.lower() in ("q", "quit", "exit"):
            print("Bye!")
            break
        if not raw_address:
            print("  ✗ Address is required.")
            continue

        print("  ⏳ Geocoding roster …", end="", flush=True)
        try:
            result = locator.find_nearest(raw_address)
        except AddressUnresolvable:
            print(f"\r  ✗ Address not found: '{raw_address}'")
            continue
        except NoTechnicianAvailable:
            print("\r  ✗ No technician with a valid address.")
            continue
        except ControleTecnicosError as exc:
            print(f"\r  ✗ Error: {exc}")
            continue

        tech = result.to_dict()
        print(f"\r  ✓ Match found ({result.candidates} technicians located)")
        print()
        print(f"  ┌──────────────────────────────────────────────────────┐")
        for key, val in tech.items():
            print(f"  │  {key[:16]:<16}  {str(val)[:33]:<33}│")
        print(f"  └──────────────────────────────────────────────────────┘")


def main() -> None:
    """Entry point — supports both a CLI argument and interactive mode."""
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    locator = TechnicianLocator(settings=settings)
    status = locator.health_check()
    if not status["healthy"]:
        print(f"Error: {status['roster']}", file=sys.stderr)
        print(
            "Set TECNICOS_CSV or run from the directory containing tecnicos.csv.",
            file=sys.stderr,
        )
        locator.close()
        sys.exit(2)

    try:
        if len(sys.argv) == 2:
            # Single-shot mode
            try:
                result = locator.find_nearest(sys.argv[1])
            except AddressNotProvided:
                print("Address not provided.", file=sys.stderr)
                sys.exit(1)
            except AddressUnresolvable as exc:
                print(f"Address not found: {exc.address}", file=sys.stderr)
                sys.exit(1)
            except NoTechnicianAvailable:
                print("No technician available.", file=sys.stderr)
                sys.exit(1)
            except (RosterNotFound, RosterInvalid) as exc:
                print(f"Error: {exc}", file=sys.stderr)
                sys.exit(2)
            for key, val in result.to_dict().items():
                print(f"{key:>20}: {val}")
        else:
            _run_interactive(locator)
    finally:
        locator.close()


if __name__ == "__main__":
    main()
