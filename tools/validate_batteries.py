from __future__ import annotations
import sys
from neuro_core.battery_audit import main

# usage: python -m tools.validate_batteries [summary.json]
if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
