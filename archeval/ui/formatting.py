# archeval/ui/formatting.py
import re
from typing import List, Tuple

_BULLET = re.compile(r"^[•\-\*]\s*")
_BOLD = re.compile(r"(\*\*[^*]+\*\*)")


def split_explanation(text: str) -> Tuple[str, List[str]]:
    """
    Split narrative text into an intro paragraph and bullet items.

    Lines before the first bullet form the intro. After the first bullet,
    plain lines are kept as their own items.
    """
    lines = [line.strip() for line in (text or "").split("\n")]
    lines = [line for line in lines if line]

    intro_lines = []
    bullets = []
    found_bullet = False

    for line in lines:
        is_bullet = bool(_BULLET.match(line))
        content = _BULLET.sub("", line).strip()

        if is_bullet and content:
            found_bullet = True
            bullets.append(content)
        elif not found_bullet:
            intro_lines.append(line)
        elif not is_bullet:
            bullets.append(line)

    return " ".join(intro_lines).strip(), bullets


def bold_segments(text: str) -> List[Tuple[str, bool]]:
    """`a **b** c` -> [("a ", False), ("b", True), (" c", False)]"""
    if not text.strip():
        return []

    segments = []
    for part in _BOLD.split(text):
        if not part:
            continue
        if part.startswith("**") and part.endswith("**") and len(part) > 4:
            segments.append((part[2:-2], True))
        else:
            segments.append((part, False))
    return segments


def score_percent(score: int, max_score: int) -> int:
    if max_score <= 0:
        return 0
    return round(score / max_score * 100)
