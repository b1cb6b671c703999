"""Allow ``python -m signaling_relay``."""

from .networking.signaling_server import run

run()
