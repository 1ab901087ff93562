"""Service endpoints: greeting, status and the arithmetic probe"""
import math
import re
from datetime import datetime, timezone
from typing import Optional, Union

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse

from core.config import SERVICE_NAME

router = APIRouter(tags=["general"])

DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
PREFIXED_PATTERN = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
INFINITY_PATTERN = re.compile(r"^[+-]?Infinity$")
RADIX = {"x": 16, "o": 8, "b": 2}

# Integral results below this magnitude are rendered without a fraction
MAX_PLAIN_INTEGER = 1e21


def parse_number(raw: Optional[str]) -> Optional[float]:
    """
    Parse a query value with JavaScript ``Number()`` rules.

    A missing value is not a number, a blank one is 0. Accepts decimals with
    an optional exponent, 0x/0o/0b literals and (+/-)Infinity. Returns None
    for anything else.
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return 0.0
    if DECIMAL_PATTERN.match(text):
        return float(text)
    if PREFIXED_PATTERN.match(text):
        try:
            return float(int(text[2:], RADIX[text[1].lower()]))
        except OverflowError:
            return math.inf
    if INFINITY_PATTERN.match(text):
        return -math.inf if text.startswith("-") else math.inf
    return None


def render_number(value: float) -> Union[int, float, None]:
    """JSON form of a sum: integral values as ints, non-finite ones as null"""
    if math.isnan(value) or math.isinf(value):
        return None
    if value.is_integer() and abs(value) < MAX_PLAIN_INTEGER:
        return int(value)
    return value


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Root endpoint"""
    return f"Hello World desde {SERVICE_NAME}!"


@router.get("/status")
async def status():
    """Liveness probe with server time"""
    return {
        "ok": True,
        "service": SERVICE_NAME,
        "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


@router.get("/sum")
async def sum_numbers(a: Optional[str] = None, b: Optional[str] = None):
    """Add two numbers: /sum?a=2&b=3 -> {"result": 5}"""
    left = parse_number(a)
    right = parse_number(b)
    if left is None or right is None:
        raise HTTPException(status_code=400, detail="invalid_numbers")
    return {"result": render_number(left + right)}
