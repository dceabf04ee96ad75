"""
Transaction Text Parser - rule-based extraction from free-text alerts.

Handles three input dialects:
  - structured statements  ("Date: 11 Dec 2025\\nAmount: -420.00 ...")
  - SMS-style notifications ("12/11/2025 → ₹1,250.00 debited ...")
  - terse transaction logs  ("txn123 2025-12-10 Amazon.in ... Dr Bal 14171.50")

Every field has its own ordered list of patterns; the first pattern that
matches wins. Nothing here raises on bad input: unmatched fields fall back
to defaults and the confidence score reports how much was recovered.
"""

import re
import math
import logging
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import Optional, Dict, Any, Tuple, Callable

logger = logging.getLogger(__name__)

DEBIT = "debit"
CREDIT = "credit"
DEFAULT_DESCRIPTION = "Transaction"

# Comma-grouped ("18,420") or plain ("18420") digits, optional paise.
# Digits are ASCII only; other scripts' numerals are not amounts or dates.
_NUMBER = r"(?:[0-9]{1,3}(?:,[0-9]{3})+|[0-9]+)(?:\.[0-9]{2})?"
_COMMA_NUMBER = r"[0-9]{1,3}(?:,[0-9]{3})+(?:\.[0-9]{2})?"
_PLAIN_NUMBER = r"[0-9]+(?:\.[0-9]{2})?"
_MONTHS = r"Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"

MONTH_INDEX = {
    "jan": 0, "feb": 1, "mar": 2, "apr": 3, "may": 4, "jun": 5,
    "jul": 6, "aug": 7, "sep": 8, "oct": 9, "nov": 10, "dec": 11,
}

CATEGORY_TAGS = ("Shopping", "Food", "Travel", "Entertainment", "Bills", "Other")

CONFIDENCE_WEIGHTS = {
    "date": 30,
    "amount": 30,
    "description": 25,
    "balance": 15,
}


@dataclass
class ParsedTransaction:
    """Structured result of parsing one blob of transaction text."""

    date: date
    description: str
    amount: float
    type: str  # "debit" or "credit"
    balance: Optional[float] = None
    confidence: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


# --- Date ---------------------------------------------------------------------

_DATE_MONTH_NAME = re.compile(
    rf"(?:Date:\s*)?([0-9]{{1,2}})\s+({_MONTHS})\s+([0-9]{{4}})", re.IGNORECASE
)
_DATE_DAY_FIRST = re.compile(r"([0-9]{1,2})/([0-9]{1,2})/([0-9]{4})")
_DATE_ISO = re.compile(r"([0-9]{4})-([0-9]{1,2})-([0-9]{1,2})")


def _calendar_date(year: int, month_index: int, day: int) -> Optional[date]:
    """Build a date, rolling overflowing months/days into the next period.

    13/13/2025 becomes 2026-01-13 and day 0 is the last day of the previous
    month. Returns None only when the result is outside the supported range.
    """
    year += month_index // 12
    month_index %= 12
    try:
        return date(year, month_index + 1, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None


def _from_month_name(day: str, month_name: str, year: str) -> Optional[date]:
    return _calendar_date(int(year), MONTH_INDEX[month_name.lower()], int(day))


def _from_day_first(day: str, month: str, year: str) -> Optional[date]:
    # Indian convention: DD/MM/YYYY, never MM/DD/YYYY
    return _calendar_date(int(year), int(month) - 1, int(day))


def _from_iso(year: str, month: str, day: str) -> Optional[date]:
    return _calendar_date(int(year), int(month) - 1, int(day))


DATE_MATCHERS: Tuple[Tuple[re.Pattern, Callable[..., Optional[date]]], ...] = (
    (_DATE_MONTH_NAME, _from_month_name),
    (_DATE_DAY_FIRST, _from_day_first),
    (_DATE_ISO, _from_iso),
)


def extract_date(text: str) -> Optional[date]:
    """Return the date of the first matching pattern, or None.

    A pattern hit ends the search even if the date it names cannot be built.
    """
    for pattern, build in DATE_MATCHERS:
        match = pattern.search(text)
        if match:
            return build(*match.groups())
    return None


# --- Amount -------------------------------------------------------------------

_AMOUNT_LABEL = re.compile(rf"Amount:\s*([+-]?{_NUMBER})")
_AMOUNT_RUPEE = re.compile(rf"₹\s*([+-]?{_NUMBER})")
_AMOUNT_DEBIT_SUFFIX = re.compile(rf"([+-]?{_NUMBER})\s*(?:debited|Dr)", re.IGNORECASE)
_AMOUNT_ANY = re.compile(_NUMBER)


def _to_float(raw: str) -> Optional[float]:
    # Digit runs long enough to overflow are treated as no match.
    value = float(raw.replace(",", ""))
    return value if math.isfinite(value) else None


def _match_amount_label(text: str) -> Optional[float]:
    match = _AMOUNT_LABEL.search(text)
    return _to_float(match.group(1)) if match else None


def _match_amount_rupee(text: str) -> Optional[float]:
    match = _AMOUNT_RUPEE.search(text)
    return _to_float(match.group(1)) if match else None


def _match_amount_debit_suffix(text: str) -> Optional[float]:
    match = _AMOUNT_DEBIT_SUFFIX.search(text)
    if not match:
        return None
    value = _to_float(match.group(1))
    if value is None:
        return None
    return value if value < 0 else -value


def _match_amount_any(text: str) -> Optional[float]:
    # Least reliable: may pick up order numbers or parts of a date.
    match = _AMOUNT_ANY.search(text)
    return _to_float(match.group(0)) if match else None


AMOUNT_MATCHERS = (
    _match_amount_label,
    _match_amount_rupee,
    _match_amount_debit_suffix,
    _match_amount_any,
)


def extract_amount(text: str) -> float:
    """Return the signed amount; negative means the text marked a debit."""
    for matcher in AMOUNT_MATCHERS:
        value = matcher(text)
        if value is not None:
            return value
    return 0.0


# --- Type ---------------------------------------------------------------------


def determine_type(text: str, signed_amount: float) -> str:
    lowered = text.lower()

    if "debited" in lowered or " dr " in lowered or " dr\n" in lowered:
        return DEBIT
    if "credited" in lowered or " cr " in lowered or " cr\n" in lowered:
        return CREDIT

    if signed_amount < 0:
        return DEBIT

    # Credit has to be signalled explicitly.
    return DEBIT


# --- Balance ------------------------------------------------------------------

BALANCE_PATTERNS = (
    re.compile(rf"Balance\s+after\s+transaction:\s*({_COMMA_NUMBER})", re.IGNORECASE),
    re.compile(rf"Balance\s+after\s+transaction:\s*({_PLAIN_NUMBER})", re.IGNORECASE),
    re.compile(rf"Available\s+Balance\s*→\s*₹\s*({_COMMA_NUMBER})", re.IGNORECASE),
    re.compile(rf"Available\s+Balance\s*→\s*₹\s*({_PLAIN_NUMBER})", re.IGNORECASE),
    re.compile(rf"Bal\s+({_COMMA_NUMBER})", re.IGNORECASE),
    re.compile(rf"Bal\s+({_PLAIN_NUMBER})", re.IGNORECASE),
)


def extract_balance(text: str) -> Optional[float]:
    for pattern in BALANCE_PATTERNS:
        match = pattern.search(text)
        if match:
            value = _to_float(match.group(1))
            if value is not None:
                return value
    return None


# --- Description --------------------------------------------------------------

# (pattern, replacement) applied in order; numeric noise goes before the
# emptiness check at the end.
DESCRIPTION_NOISE = (
    (re.compile(r"txn[A-Za-z0-9_]*\s*", re.IGNORECASE), ""),
    (re.compile(r"#[0-9]+[-0-9]*"), ""),
    (re.compile(r"[0-9]{1,2}/[0-9]{1,2}/[0-9]{4}"), ""),
    (re.compile(rf"[0-9]{{1,2}}\s+(?:{_MONTHS})\s+[0-9]{{4}}", re.IGNORECASE), ""),
    (re.compile(r"[0-9]{4}-[0-9]{1,2}-[0-9]{1,2}"), ""),
    (re.compile(rf"Amount:\s*[+-]?{_NUMBER}", re.IGNORECASE), ""),
    (re.compile(rf"₹\s*[+-]?{_NUMBER}"), ""),
    (re.compile(rf"[+-]?{_NUMBER}\s*(?:debited|credited|Dr|Cr)", re.IGNORECASE), ""),
    (re.compile(rf"Balance\s+after\s+transaction:\s*{_NUMBER}", re.IGNORECASE), ""),
    (re.compile(rf"Available\s+Balance\s*→\s*₹{_NUMBER}", re.IGNORECASE), ""),
    (re.compile(rf"Bal\s+{_NUMBER}", re.IGNORECASE), ""),
    (re.compile(r"Date:\s*", re.IGNORECASE), ""),
    (re.compile(r"Description:\s*", re.IGNORECASE), ""),
    (re.compile(r"→"), ""),
    (re.compile(r"\*"), " "),
    (re.compile(rf"\s+(?:{'|'.join(CATEGORY_TAGS)})\Z", re.IGNORECASE), ""),
)


def extract_description(text: str) -> str:
    """Strip ids, dates, amounts, balances and labels; keep the narrative."""
    description = text
    for pattern, replacement in DESCRIPTION_NOISE:
        description = pattern.sub(replacement, description)

    description = re.sub(r"\s+", " ", description).strip()
    return description or DEFAULT_DESCRIPTION


# --- Confidence ---------------------------------------------------------------


def calculate_confidence(
    parsed_date: Optional[date],
    signed_amount: float,
    description: str,
    balance: Optional[float],
) -> int:
    """Rule-based completeness score in [0, 100].

    ``parsed_date`` is the date found in the text; the today-fallback is not
    passed in and therefore earns nothing.
    """
    date_valid = isinstance(parsed_date, date)
    amount_valid = abs(signed_amount) > 0
    description_valid = len(description) > 3 and description != DEFAULT_DESCRIPTION
    balance_valid = balance is not None and balance > 0

    # All four fields present is a flat 100, independent of the weights.
    if date_valid and amount_valid and description_valid and balance_valid:
        return 100

    score = 0
    if date_valid:
        score += CONFIDENCE_WEIGHTS["date"]
    if amount_valid:
        score += CONFIDENCE_WEIGHTS["amount"]
    if description_valid:
        score += CONFIDENCE_WEIGHTS["description"]
    if balance_valid:
        score += CONFIDENCE_WEIGHTS["balance"]

    return min(100, max(0, score))


# --- Entry point --------------------------------------------------------------


def parse_transaction_text(text: Optional[str]) -> ParsedTransaction:
    """Parse a raw statement line / SMS / log entry into a ParsedTransaction.

    Always returns a result; missing fields degrade to defaults (today's
    date, zero amount, "Transaction", no balance) and lower the confidence.
    """
    normalized = (text or "").strip()

    parsed_date = extract_date(normalized)
    signed_amount = extract_amount(normalized)
    txn_type = determine_type(normalized, signed_amount)
    description = extract_description(normalized)
    balance = extract_balance(normalized)

    confidence = calculate_confidence(parsed_date, signed_amount, description, balance)

    result = ParsedTransaction(
        date=parsed_date if parsed_date is not None else date.today(),
        description=description,
        amount=abs(signed_amount),
        type=txn_type,
        balance=balance,
        confidence=confidence,
    )
    logger.debug(
        "Parsed transaction text (%d chars): type=%s confidence=%d",
        len(normalized),
        result.type,
        result.confidence,
    )
    return result
