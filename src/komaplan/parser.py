"""SMLP string parsing and numeric shorthand conversion."""

from __future__ import annotations

import re

from komaplan.autoassign import assign_panel_sizes
from komaplan.models import PanelSize

_NON_SMLP = re.compile(r"[^SMLP]")
_DIGITS = re.compile(r"[0-9]+")


def parse_smlp_string(text: str) -> list[list[PanelSize]]:
    """Split an SMLP string into pages of panel sizes.

    Case-insensitive; anything that is not S, M, L or P is dropped. ``P``
    closes the current page and never produces an empty page.
    """
    cleaned = _NON_SMLP.sub("", text.upper())
    pages: list[list[PanelSize]] = []
    current: list[PanelSize] = []
    for ch in cleaned:
        if ch == "P":
            if current:
                pages.append(current)
                current = []
        else:
            current.append(PanelSize(ch))
    if current:
        pages.append(current)
    return pages


def validate_smlp_string(text: str) -> bool:
    return bool(_NON_SMLP.sub("", text.upper()))


def is_numeric_only(text: str) -> bool:
    return _DIGITS.fullmatch(text.strip()) is not None


def _split_counts(digits: str) -> list[int]:
    """Read one panel count per page.

    A lone ``0`` is an empty page. ``0`` followed by two or more digits and a
    closing ``0`` is a multi-digit count, e.g. ``0100`` is ten panels.
    """
    counts: list[int] = []
    n = len(digits)
    i = 0
    while i < n:
        if digits[i] != "0":
            counts.append(int(digits[i]))
            i += 1
            continue
        if i + 3 <= n and digits[i + 1] != "0":
            j = i + 1
            num = ""
            while j < n:
                if digits[j] == "0" and len(num) >= 2:
                    break
                num += digits[j]
                j += 1
            if len(num) >= 2 and j < n and digits[j] == "0":
                counts.append(int(num))
                i = j + 1
                continue
        counts.append(0)
        i += 1
    return counts


def convert_numbers_to_smlp(text: str) -> str:
    """Expand a string of per-page panel counts into an SMLP string.

    Input that is not purely digits is returned unchanged.
    """
    if _DIGITS.fullmatch(text) is None:
        return text

    counts = _split_counts(text)
    out: list[str] = []
    for idx, count in enumerate(counts):
        if count:
            out.extend(size.value for size in assign_panel_sizes(count))
        if idx < len(counts) - 1:
            out.append(PanelSize.P.value)
    return "".join(out)
