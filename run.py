#!/usr/bin/env python3
"""
Bank Simulation Entry Point

Runs the scripted account demo on the console.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from bank_simulation.simulation import main


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n👋 Simulation interrupted")
    except Exception as e:
        print(f"❌ Error running simulation: {e}")
        sys.exit(1)
