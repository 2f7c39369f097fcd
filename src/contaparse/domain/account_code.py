"""Account code parsing.

Ledger exports head every account block with a hierarchical code such as
``132-020-000-000-00``. The first group identifies the process family and the
second group the expense category inside that family.
"""

import re
from typing import Any, Optional

from contaparse.domain.entities import AccountCode

ACCOUNT_CODE_PATTERN = re.compile(r"^(\d{3})-(\d{3})-\d{3}-\d{3}-\d{2}$")

APK_PREFIX = "132"
EPK_PREFIX = "133"
FAMILY_PREFIXES = {APK_PREFIX: "apk", EPK_PREFIX: "epk"}


def parse_account_code(code: Any) -> Optional[AccountCode]:
    """Parse a hierarchical account code.

    Args:
        code: Candidate code, usually the first cell of a row

    Returns:
        AccountCode, or None if the value does not have the
        NNN-NNN-NNN-NNN-NN shape
    """
    if not isinstance(code, str):
        return None

    trimmed = code.strip()
    match = ACCOUNT_CODE_PATTERN.match(trimmed)
    if match is None:
        return None

    return AccountCode(full=trimmed, main_group=match.group(1), account_code=match.group(2))


def extract_account_code(code: Any) -> Optional[str]:
    """Return only the second group of a full account code (e.g. "020")."""
    parsed = parse_account_code(code)
    return parsed.account_code if parsed else None


def is_valid_account_code(code: Any) -> bool:
    return parse_account_code(code) is not None


def process_family_for_code(code: Any) -> Optional[str]:
    """Return "apk" or "epk" for codes under the two reserved prefixes."""
    parsed = parse_account_code(code)
    if parsed is None:
        return None
    return FAMILY_PREFIXES.get(parsed.main_group)
