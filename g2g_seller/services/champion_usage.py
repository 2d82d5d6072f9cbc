import json
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from loguru import logger

from g2g_seller.core.config import CHAMPION_USAGE_PATH


class ChampionUsageStore:
    """How many published titles mentioned each champion.

    Titles pick the least used champions first so consecutive listings do not
    all advertise the same names.
    """

    def __init__(self, path: Path | str = CHAMPION_USAGE_PATH):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> Dict[str, int]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Champion usage file {self.path} is corrupt; starting from zero")
            return {}
        return {str(k): int(v) for k, v in data.items()}

    def _dump(self, data: Dict[str, int]) -> None:
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    def track(self, champions: Iterable[str]) -> None:
        data = self._load()
        names = list(champions)
        for name in names:
            data[name] = data.get(name, 0) + 1
        self._dump(data)
        logger.info(f"Champion usage updated for {len(names)} champions")

    def sort_by_usage(self, champions: Iterable[str]) -> List[str]:
        """Least used first; ties alphabetical."""
        usage = self._load()
        return sorted(champions, key=lambda name: (usage.get(name, 0), name.lower()))

    def stats(self) -> List[Tuple[str, int]]:
        return sorted(self._load().items(), key=lambda item: item[1])

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
