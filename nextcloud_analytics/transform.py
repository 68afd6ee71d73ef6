import json
import math
from datetime import datetime, timezone
from decimal import Decimal

URL_PREFIX = "apps/analytics/api/1.0/adddata/{collection}"

# RFC 2822 names, not locale dependent like %a / %b
_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

def build_url(base_url: str, collection: int) -> str:
    if isinstance(collection, bool) or not isinstance(collection, int) or collection < 0:
        raise ValueError(f"collection must be a non-negative integer, got {collection!r}")
    url = base_url if base_url.endswith("/") else base_url + "/"
    return url + URL_PREFIX.format(collection=collection)

def format_number(value) -> str:
    """Plain decimal text of a float: no exponent, no trailing ".0"."""
    f = float(value)
    if not math.isfinite(f):
        raise ValueError(f"dimension3 must be a finite number, got {f!r}")
    text = format(Decimal(repr(f)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text

def now_dt() -> datetime:
    return datetime.now(timezone.utc)

def to_rfc2822(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return (f"{_DAYS[moment.weekday()]}, {moment.day} {_MONTHS[moment.month - 1]} "
            f"{moment.year:04d} {moment:%H:%M:%S} +0000")

def to_analytics_payload(dimension1, dimension2, dimension3) -> dict:
    # the service expects dimension3 as a quoted number
    return {
        "dimension1": str(dimension1),
        "dimension2": str(dimension2),
        "dimension3": format_number(dimension3),
    }

def render_body(payload: dict) -> bytes:
    return json.dumps(payload, indent=4, ensure_ascii=False).encode("utf-8")
