"""Static lookup tables: human labels -> catalog attribute ids."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

# Every lookup falls back to one of these rather than an empty code
DEFAULT_SERVER = "EUW"
DEFAULT_RANK = "unranked"

ACCOUNT_TYPE_COLLECTION = "319340f0"
ACCOUNT_TYPE_VALUE = "65ec9642"
REGION_COLLECTION = "e80c30d1"
RANK_COLLECTION = "9a3bf4c2"
CHAMPIONS_COLLECTION = "4c7e1d20"
SKINS_COLLECTION = "b15f0e7a"

REGION_IDS: Dict[str, str] = {
    "EUW": "304244a1",
    "EUNE": "1a87dd85",
    "NA": "302ba1e6",
    "BR": "6c9f06c3",
    "LAN": "302ba1e6",
    "LAS": "d6ed5ab1",
    "OCE": "e35ad6c4",
    "TR": "5f8be29a",
    "RU": "d94d8d49",
    "JP": "8b6a5b8e",
    "KR": "a7bb0eb5",
}

SERVER_ALIASES: Dict[str, str] = {
    "brazil": "BR",
    "br": "BR",
    "br1": "BR",
    "euw": "EUW",
    "euw1": "EUW",
    "eune": "EUNE",
    "eun1": "EUNE",
    "eune1": "EUNE",
    "na": "NA",
    "na1": "NA",
    "oce": "OCE",
    "oc1": "OCE",
    "oce1": "OCE",
    "las": "LAS",
    "la2": "LAS",
    "las1": "LAS",
    "lan": "LAN",
    "la1": "LAN",
    "lan1": "LAN",
    "tr": "TR",
    "tr1": "TR",
    "ru": "RU",
    "ru1": "RU",
    "jp": "JP",
    "jp1": "JP",
    "kr": "KR",
}

RANK_IDS: Dict[str, str] = {
    "unranked": "0d6b1a5e",
    "iron": "5a1c9e02",
    "bronze": "8e47d3b1",
    "silver": "c2f06a94",
    "gold": "71b8e5dc",
    "platinum": "e93a4f07",
    "emerald": "3fd21c68",
    "diamond": "a6c07b3e",
    "master": "19e5d8fa",
    "grandmaster": "d4728b0c",
    "challenger": "6b0af319",
}

# (lower bound inclusive, dataset id); first row is the default bracket
CHAMPION_BRACKETS: List[Tuple[int, str]] = [
    (0, "f1a2c3d4"),    # 0-20
    (21, "a9b8c7d6"),   # 21-50
    (51, "0e1f2a3b"),   # 51-100
    (101, "7c6d5e4f"),  # 101-150
    (151, "3b2a1f0e"),  # 151+
]

SKIN_BRACKETS: List[Tuple[int, str]] = [
    (0, "5d4c3b2a"),    # 0-10
    (11, "c1d2e3f4"),   # 11-50
    (51, "9f8e7d6c"),   # 51-100
    (101, "2b3c4d5e"),  # 101+
]


def normalize_server(server: Optional[str]) -> Optional[str]:
    """Canonical server code, or None when the label is unknown."""
    if not server:
        return None
    key = server.strip().lower()
    if key.upper() in REGION_IDS:
        return key.upper()
    return SERVER_ALIASES.get(key)


def region_id(server: Optional[str]) -> str:
    return REGION_IDS[normalize_server(server) or DEFAULT_SERVER]


def server_filter(server: Optional[str]) -> str:
    """Composite `filter_attr` value: account-type facet | region facet."""
    return f"{ACCOUNT_TYPE_COLLECTION}:{ACCOUNT_TYPE_VALUE}|{REGION_COLLECTION}:{region_id(server)}"


def rank_id(rank: Optional[str]) -> str:
    key = (rank or "").strip().lower().replace(" ", "")
    return RANK_IDS.get(key, RANK_IDS[DEFAULT_RANK])


def _bracket(value: Optional[int], table: List[Tuple[int, str]]) -> str:
    if value is None or value < 0:
        return table[0][1]
    chosen = table[0][1]
    for lower, dataset_id in table:
        if value >= lower:
            chosen = dataset_id
    return chosen


def champion_bracket_id(count: Optional[int]) -> str:
    return _bracket(count, CHAMPION_BRACKETS)


def skin_bracket_id(count: Optional[int]) -> str:
    return _bracket(count, SKIN_BRACKETS)


def offer_attributes(server: Optional[str], rank: Optional[str], champions: Optional[int], skins: Optional[int]) -> List[dict]:
    return [
        {"collection_id": REGION_COLLECTION, "dataset_id": region_id(server)},
        {"collection_id": ACCOUNT_TYPE_COLLECTION, "dataset_id": ACCOUNT_TYPE_VALUE},
        {"collection_id": RANK_COLLECTION, "dataset_id": rank_id(rank)},
        {"collection_id": CHAMPIONS_COLLECTION, "dataset_id": champion_bracket_id(champions)},
        {"collection_id": SKINS_COLLECTION, "dataset_id": skin_bracket_id(skins)},
    ]
