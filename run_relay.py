#!/usr/bin/env python3
"""
Run the signaling relay server from a source checkout.

Settings are read from the environment and an optional .env file
(see RelayConfigManager); PORT defaults to 3000.
"""

import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from signaling_relay.networking.signaling_server import run

if __name__ == "__main__":
    run()
