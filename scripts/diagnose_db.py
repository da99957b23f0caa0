# Rev 1.0.0

"""Run the hotspot database diagnostics from a source checkout.

Usage: python scripts/diagnose_db.py [--repair] [--backup]
"""
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dbdoctor.main import main


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
