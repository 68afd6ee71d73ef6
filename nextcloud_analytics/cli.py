#!/usr/bin/env python3
import argparse
import logging
import sys
from datetime import datetime

import requests

from .client import SyncClient
from .errors import ApiError
from .settings import get_settings

log = logging.getLogger("nextcloud_analytics")

def _client(a) -> SyncClient:
    missing = [flag for flag, v in (("--url", a.url), ("--collection", a.collection),
                                    ("--user", a.user), ("--password", a.password)) if v is None]
    if missing:
        raise ValueError(f"missing {', '.join(missing)} (or the matching NEXTCLOUD_*/ANALYTICS_* setting)")
    return SyncClient(a.url, a.collection, a.user, a.password, timeout=a.timeout)

def cmd_send(client, a):
    client.send_data(a.dimension1, a.dimension2, a.value)
    print(f"[SEND] {a.dimension1},{a.dimension2},{a.value} -> {client.url}")

def cmd_timeline(client, a):
    if a.at is None:
        client.send_timeline_now_data(a.key, a.value)
    else:
        client.send_timeline_data(a.key, a.at, a.value)
    print(f"[TIMELINE] {a.key}={a.value} -> {client.url}")

def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    ap = argparse.ArgumentParser(prog="nc-analytics", description="Push data points to Nextcloud Analytics")
    ap.add_argument("--url", default=settings.NEXTCLOUD_URL)
    ap.add_argument("--collection", type=int, default=settings.ANALYTICS_COLLECTION)
    ap.add_argument("--user", default=settings.NEXTCLOUD_USER)
    ap.add_argument("--password", default=settings.NEXTCLOUD_APP_PASSWORD, help="app password")
    ap.add_argument("--timeout", type=float, default=settings.ANALYTICS_TIMEOUT_S)
    ap.add_argument("--log-level", default=settings.LOG_LEVEL)
    sub = ap.add_subparsers(dest="cmd", required=True)
    s = sub.add_parser("send", help="send dimension1, dimension2, value")
    s.add_argument("dimension1"); s.add_argument("dimension2"); s.add_argument("value", type=float)
    t = sub.add_parser("timeline", help="send key, value at --at (default: now)")
    t.add_argument("key"); t.add_argument("value", type=float)
    t.add_argument("--at", type=datetime.fromisoformat, help="ISO 8601 time, UTC when naive")
    return ap

def main(argv=None) -> int:
    try:
        ap = build_parser()
    except ValueError as e:  # pydantic ValidationError
        print(f"config error: {e}", file=sys.stderr)
        return 2
    a = ap.parse_args(argv)
    level = logging.getLevelName(a.log_level.upper())
    if not isinstance(level, int):
        print(f"config error: unknown log level {a.log_level!r}", file=sys.stderr)
        return 2
    logging.basicConfig(level=level, format="%(asctime)s | %(levelname)s | %(message)s")
    try:
        client = _client(a)
    except ValueError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    with client:
        try:
            {"send": cmd_send, "timeline": cmd_timeline}[a.cmd](client, a)
        except ApiError as e:
            print(f"api error: {e}", file=sys.stderr)
            return 1
        except requests.RequestException as e:
            log.error("transport error: %s", e)
            print(f"network error: {e}", file=sys.stderr)
            return 1
        except ValueError as e:
            print(f"bad value: {e}", file=sys.stderr)
            return 2
    return 0

if __name__ == "__main__":
    sys.exit(main())
