"""Export file classification.

Detects which process family an export belongs to, whether it is broken
down by segment or is a general expense ledger, and which period it covers.
Detection never fails: unrecognizable input yields a low-confidence default
and the caller decides whether to ask for confirmation.
"""

import logging
import re
import unicodedata
from typing import Any, Sequence

from contaparse.domain.account_code import APK_PREFIX, EPK_PREFIX, parse_account_code
from contaparse.domain.entities import FileDetectionResult
from contaparse.utils.date_parser import MONTH_NAMES

logger = logging.getLogger(__name__)

PRIMARY_FAMILY = "apk"
SECONDARY_FAMILY = "epk"

SCAN_ROW_LIMIT = 100
PERIOD_ROW = 2
PERIOD_FALLBACK_LENGTH = 50
PERIOD_NOT_DETECTED = "No detectado"

FAMILY_PHRASES = {
    PRIMARY_FAMILY: ("APARCERIA",),
    SECONDARY_FAMILY: ("ENGORDA", "PRODUCCION"),
}
GENERAL_EXPENSE_TOKEN = "GG"
BREAKDOWN_TOKENS = ("APK", "EPK")

CODE_PREFIX_SCORE = 50
PHRASE_SCORE = 30
SEGMENTS_FOUND_SCORE = 10
SEGMENT_MARKER_SCORE = 10
DEFAULT_CONFIDENCE = 20

# Below this the import asks for explicit confirmation
CONFIRMATION_THRESHOLD = 70

_PERIOD_PATTERN = re.compile(
    r"\b(" + "|".join(name.upper() for name in MONTH_NAMES) + r")\s+(?:DE\s+|DEL\s+)?(\d{4})\b"
)


def _cell_text(row: Sequence[Any], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index]).strip()


def _fold(text: str) -> str:
    """Upper-case and strip accents so "Aparcería" matches "APARCERIA"."""
    decomposed = unicodedata.normalize("NFKD", text.upper())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_segment_row(first_cell: str) -> bool:
    return first_cell.lower().startswith("segmento")


def segment_name(first_cell: str) -> str:
    """Return the folded segment name: the last word after the "Segmento" prefix."""
    words = _fold(first_cell).split()
    return words[-1] if len(words) > 1 else ""


def detect_period(rows: Sequence[Sequence[Any]]) -> str:
    """Extract the reporting period label from the export's title block."""
    if len(rows) <= PERIOD_ROW:
        return PERIOD_NOT_DETECTED

    text = _cell_text(rows[PERIOD_ROW], 0)
    if not text:
        return PERIOD_NOT_DETECTED

    match = _PERIOD_PATTERN.search(_fold(text))
    if match:
        return f"{match.group(1).capitalize()} {match.group(2)}"
    return text[:PERIOD_FALLBACK_LENGTH]


def detect_file_type(rows: Sequence[Sequence[Any]]) -> FileDetectionResult:
    """Classify a raw row matrix.

    Args:
        rows: Spreadsheet rows as read from the first sheet

    Returns:
        FileDetectionResult with the chosen family and a 0-100 confidence
    """
    indicators = {
        "apk_code": False,
        "epk_code": False,
        "apk_phrase": False,
        "epk_phrase": False,
        "segments_found": False,
        "general_expense_segment": False,
        "breakdown_segment": False,
    }

    for row in rows[:SCAN_ROW_LIMIT]:
        first_cell = _cell_text(row, 0)
        if not first_cell:
            continue

        parsed = parse_account_code(first_cell)
        if parsed is not None:
            if parsed.main_group == APK_PREFIX:
                indicators["apk_code"] = True
            elif parsed.main_group == EPK_PREFIX:
                indicators["epk_code"] = True

            label = _fold(_cell_text(row, 1))
            for family, phrases in FAMILY_PHRASES.items():
                if any(phrase in label for phrase in phrases):
                    indicators[f"{family}_phrase"] = True
            continue

        if is_segment_row(first_cell):
            indicators["segments_found"] = True
            name = segment_name(first_cell)
            if name.endswith(GENERAL_EXPENSE_TOKEN):
                indicators["general_expense_segment"] = True
            if name.endswith(BREAKDOWN_TOKENS):
                indicators["breakdown_segment"] = True

    scores = {
        family: (CODE_PREFIX_SCORE if indicators[f"{family}_code"] else 0)
        + (PHRASE_SCORE if indicators[f"{family}_phrase"] else 0)
        for family in (PRIMARY_FAMILY, SECONDARY_FAMILY)
    }
    if scores[PRIMARY_FAMILY] == 0 and scores[SECONDARY_FAMILY] == 0:
        process_family = SECONDARY_FAMILY
        confidence = DEFAULT_CONFIDENCE
    elif scores[PRIMARY_FAMILY] >= scores[SECONDARY_FAMILY]:
        process_family = PRIMARY_FAMILY
        confidence = scores[PRIMARY_FAMILY]
    else:
        process_family = SECONDARY_FAMILY
        confidence = scores[SECONDARY_FAMILY]

    if indicators["segments_found"]:
        confidence += SEGMENTS_FOUND_SCORE
    if indicators["general_expense_segment"] or indicators["breakdown_segment"]:
        confidence += SEGMENT_MARKER_SCORE

    has_segment_breakdown = indicators["breakdown_segment"]
    is_general_expense = not has_segment_breakdown and (
        indicators["general_expense_segment"] or not indicators["segments_found"]
    )

    result = FileDetectionResult(
        process_family=process_family,
        has_segment_breakdown=has_segment_breakdown,
        is_general_expense=is_general_expense,
        period=detect_period(rows),
        data_group=process_family,
        confidence=max(0, min(100, confidence)),
        indicators=indicators,
    )
    logger.info(
        "Detected %s (general expense: %s) with confidence %d",
        result.process_family,
        result.is_general_expense,
        result.confidence,
    )
    return result


def upload_file_type(result: FileDetectionResult) -> str:
    """Return the upload slot for a detection ("apk-vueltas", "epk-gg", ...)."""
    suffix = "gg" if result.is_general_expense else "vueltas"
    return f"{result.process_family}-{suffix}"


def needs_confirmation(result: FileDetectionResult) -> bool:
    return result.confidence < CONFIRMATION_THRESHOLD
