from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class AccountData:
    server: str = "Unknown"
    level: int = 0
    honor_level: int = 3
    champions_count: int = 0
    champions: List[str] = field(default_factory=list)
    skins_count: int = 0
    skins: List[str] = field(default_factory=list)
    riot_points: int = 0
    blue_essence: int = 0
    orange_essence: int = 0
    last_play_date: str = "Unknown"
    opgg_link: Optional[str] = None


@dataclass
class AccountFolder:
    name: str
    path: Path

    def files(self) -> List[str]:
        return sorted(p.name for p in self.path.iterdir() if p.is_file())
