# univote/operations/time_sync.py
# Clock drift check against NTP servers. Election windows and vote admission
# are decided from the local clock, so drift directly shifts when polls open.

import ntplib
from datetime import datetime, timezone
from typing import Dict, List, Sequence

from univote.clock import isoformat

DEFAULT_NTP_SERVERS = [
    "pool.ntp.org",
    "time.google.com",
    "time.windows.com",
    "time.apple.com"
]

# Largest drift, in seconds, at which poll opening and closing is still trusted
MAX_ALLOWED_OFFSET = 0.5


def _probe(client: ntplib.NTPClient, server: str, max_offset: float) -> Dict:
    try:
        response = client.request(server, version=3, timeout=2)
    except (ntplib.NTPException, OSError) as e:
        return {"server": server, "error": str(e), "status": "failed"}

    server_time = datetime.fromtimestamp(response.tx_time, timezone.utc).replace(tzinfo=None)
    return {
        "server": server,
        "offset_s": round(response.offset, 6),
        "time": isoformat(server_time),
        "status": "ok" if abs(response.offset) <= max_offset else "drifted",
    }


def check_time_sync(servers: Sequence[str] = DEFAULT_NTP_SERVERS, max_offset: float = MAX_ALLOWED_OFFSET) -> Dict:
    """
    Ask each server for its offset from the local clock.

    The clock counts as healthy when the mean offset of the servers that
    answered stays within ``max_offset``. Unreachable servers are listed as
    ``failed`` and left out of the mean; if none answer the check fails.
    """
    client = ntplib.NTPClient()
    results: List[Dict] = [_probe(client, server, max_offset) for server in servers]

    offsets = [r["offset_s"] for r in results if r["status"] != "failed"]
    avg_offset = round(sum(offsets) / len(offsets), 6) if offsets else None

    return {
        "overall_ok": avg_offset is not None and abs(avg_offset) <= max_offset,
        "average_offset_s": avg_offset,
        "max_allowed_offset_s": max_offset,
        "results": results
    }
