#!/usr/bin/env python3
"""
Main CLI entrypoint for ShortSync.

This is a convenience wrapper that imports and runs the assembly pipeline.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from shortsync.pipelines.run_assembly import main

if __name__ == "__main__":
    sys.exit(main())
