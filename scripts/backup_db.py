# Rev 1.0.0

"""Take a standalone backup of the hotspot database (cron friendly).

Keeps the newest 10 backups unless DBDOCTOR_BACKUP_KEEP says otherwise
(0 keeps everything).
"""
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dbdoctor.backup_main import main


if __name__ == "__main__":
    raise SystemExit(main())
