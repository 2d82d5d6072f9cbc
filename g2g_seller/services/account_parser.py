# account_parser.py
"""
Pure text processing for account files.

Account folders hold loosely formatted notes written by hand (or pasted from a
supplier message). Everything here works on plain strings and never touches
the network or the filesystem.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from g2g_seller.core.config import TITLE_MAX_LENGTH
from g2g_seller.core.errors import ParseError
from g2g_seller.core.logger import get_logger
from g2g_seller.models.account import AccountData
from g2g_seller.services.attributes import normalize_server

logger = get_logger(__name__)


# ---- Credential section grammar ----

START_MARKERS = ("Account information", "Account details", "Account data")
END_MARKERS = ("Thank you for your purchase", "Thanks for your purchase", "Good luck")
SCREENSHOT_MARKERS = ("Screenshot:", "Full info:", "Media:")

REQUIRED_LINES = (
    ("Login:", re.compile(r"^\s*Login\s*:\s*\S+", re.I | re.M)),
    ("Password:", re.compile(r"^\s*Password\s*:\s*\S+", re.I | re.M)),
    ("Email is", re.compile(r"^\s*Email\s+is\b", re.I | re.M)),
)

URL_RE = re.compile(r"https?://[^\s<>\"')\]]+", re.I)
IMAGE_URL_RE = re.compile(
    r"https?://[^\s<>\"')\]]*(?:\.(?:png|jpe?g|gif|webp)\b|imgur\.com|prnt\.sc|ibb\.co|gyazo\.com)[^\s<>\"')\]]*",
    re.I,
)

LIST_END_MARKERS = ("\n\n", "\n[", "\n─", "\nLink:", "\nRegion:", "\nList of")
BULLET_RE = re.compile(r"^[•\-\*]\s*")


def _find_first(text: str, markers: Sequence[str], start: int = 0) -> tuple[int, str]:
    lowered = text.lower()
    best, found = -1, ""
    for marker in markers:
        idx = lowered.find(marker.lower(), start)
        if idx != -1 and (best == -1 or idx < best):
            best, found = idx, marker
    return best, found


def extract_screenshot_url(raw_text: str) -> Optional[str]:
    """URL after a screenshot marker, else the first image-looking URL."""
    idx, marker = _find_first(raw_text, SCREENSHOT_MARKERS)
    if idx != -1:
        match = URL_RE.search(raw_text, idx + len(marker))
        if match:
            return match.group(0).rstrip(".,;")

    match = IMAGE_URL_RE.search(raw_text)
    if match:
        return match.group(0).rstrip(".,;")
    return None


def credential_section(raw_text: str) -> str:
    start_idx, start_marker = _find_first(raw_text, START_MARKERS)
    begin = start_idx + len(start_marker) if start_idx != -1 else 0
    if start_idx == -1:
        logger.debug("No start marker found; using the whole text as credential section")

    end_idx, _ = _find_first(raw_text, END_MARKERS + SCREENSHOT_MARKERS, begin)
    end = end_idx if end_idx != -1 else len(raw_text)
    return raw_text[begin:end]


def account_text_to_credential_payload(raw_text: str) -> str:
    """
    Cut the credential block out of a purchase message.

    The block starts after a start marker (or at the top), ends before an end
    or screenshot marker (or at the bottom) and must contain the `Login:`,
    `Password:` and `Email is` lines. Returns the block's non-empty lines
    joined with newlines, ready to upload as-is.
    """
    if not raw_text or not raw_text.strip():
        raise ParseError("Account text is empty")

    section = credential_section(raw_text)
    missing = [label for label, pattern in REQUIRED_LINES if not pattern.search(section)]
    if missing:
        raise ParseError(f"Credential block is missing required line(s): {', '.join(missing)}")

    lines = [line.strip() for line in section.splitlines()]
    payload = "\n".join(line for line in lines if line).strip(" :\n")
    return payload


# ---- Account summary parsing ----

def _extract_number(text: str, pattern: str) -> int:
    match = re.search(pattern, text, re.I)
    return int(match.group(1)) if match else 0


def extract_list(text: str, start_marker: str) -> List[str]:
    start = text.find(start_marker)
    if start == -1:
        return []

    chunk = text[start + len(start_marker):]
    end = len(chunk)
    for marker in LIST_END_MARKERS:
        idx = chunk.find(marker)
        if idx != -1 and idx < end:
            end = idx
    chunk = chunk[:end].strip()

    if "," in chunk:
        items = [item.strip().rstrip(".") for item in chunk.split(",")]
        return [item for item in items if item]

    items = [BULLET_RE.sub("", item).strip().rstrip(".") for item in chunk.split("\n")]
    return [item for item in items if item and not item.startswith(("─", "["))]


def _server_label(label: str) -> str:
    return normalize_server(label) or label.upper()


def extract_server(text: str) -> str:
    match = re.search(r"op\.gg/summoners/([a-z0-9]+)/", text, re.I)
    if match:
        return _server_label(match.group(1))

    match = re.search(r"Server\s*[-:]\s*([A-Za-z0-9]+)", text, re.I)
    if match:
        return _server_label(match.group(1))

    match = re.search(r"_([a-z]+\d?)_", text, re.I)
    if match:
        return _server_label(match.group(1))

    return "Unknown"


def parse_account_data(text: str) -> AccountData:
    if not text.strip():
        raise ParseError("Account text is empty")

    data = AccountData(
        server=extract_server(text),
        level=_extract_number(text, r"Level\s*[-:]\s*(\d+)"),
        honor_level=_extract_number(text, r"Honor\s+level\s+is\s+(\d+)") or 3,
        champions_count=_extract_number(text, r"Champions\s*[-:]\s*(\d+)"),
        champions=extract_list(text, "List of Champions:"),
        skins_count=_extract_number(text, r"Skins\s*[-:]\s*(\d+)"),
        skins=extract_list(text, "List of Skins:"),
        riot_points=_extract_number(text, r"Riot\s+Points\s*[-:]\s*(\d+)"),
        blue_essence=_extract_number(text, r"Blue\s+Essence\s*[-:]\s*(\d+)"),
        orange_essence=_extract_number(text, r"Orange\s+Essence\s*[-:]\s*(\d+)"),
    )

    opgg = re.search(r"(https?://\S*op\.gg\S+)", text, re.I)
    if opgg:
        data.opgg_link = opgg.group(1)

    logger.debug(
        "Parsed account: server=%s level=%d champions=%d skins=%d",
        data.server,
        data.level,
        data.champions_count,
        data.skins_count,
    )
    return data


# ---- Listing text ----

def generate_title(data: AccountData, champions: Optional[Sequence[str]] = None, max_length: int = TITLE_MAX_LENGTH) -> str:
    """
    Skins go in first, then champions (in the given order, default the parsed
    list) while there is room; at most 10 items once champions are involved.
    """
    base = f"[{data.server} ⍜] - [{data.level} LVL | {data.champions_count} Champions"
    tail = " | Handleveled | Full Access ⍜]"
    room = max_length - len(base) - len(tail)

    items: List[str] = []
    for skin in data.skins:
        cost = len(skin) + 3  # " | "
        if cost > room:
            break
        items.append(skin)
        room -= cost

    pool = list(champions) if champions is not None else data.champions
    if room > 0:
        for champion in pool:
            cost = len(champion) + 3
            if cost > room:
                break
            items.append(champion)
            room -= cost
            if len(items) >= 10:
                break

    if items:
        return base + " | " + " | ".join(items) + tail
    return base + tail


def generate_description(data: AccountData) -> str:
    lines = [
        "⮸Full info into the media⮸",
        "",
        "▸ Instant Auto-Delivery 24/7",
        "⤱ You must play 10 Quickplay or Draft games to unlock Ranked.",
        "⤱ Last Rank: The Account has never been ranked, but MMR is random.",
        "⤱ Current Rank: Unranked",
        f"⤱ Last Play / Inactive From - {data.last_play_date}",
        "",
        f"◉ Level - {data.level}",
        f"◉ Honor level is {data.honor_level}",
        f"◉ Champions - {data.champions_count}",
        f"◉ Skins - {data.skins_count}",
        f"◉ Riot Points - {data.riot_points}",
        f"◉ Blue Essence - {data.blue_essence}",
        f"◉ Orange Essence - {data.orange_essence}",
        "",
        "✓ Full Access [You can change the email, password, etc.]",
        "⍜ Completely Safe with 0% Banrate",
        "⮸ Hand-Leveled",
        "✫ Positive Reviews",
    ]

    if data.champions:
        lines += ["", "◉ List of Champions:", ", ".join(data.champions) + "."]
    if data.skins:
        lines += ["", "◉ List of Skins:", ", ".join(data.skins) + "."]

    return "\n".join(lines)


def titled_champions(title: str, champions: Sequence[str]) -> List[str]:
    """Champions that made it into a generated title."""
    parts = {part.strip() for part in title.split("|")}
    return [champion for champion in champions if champion in parts]
