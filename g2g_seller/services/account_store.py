# account_store.py

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger

from g2g_seller.core.config import ACCOUNT_TEMPLATE_FILE, RECEIPT_STATUS
from g2g_seller.models.account import AccountFolder

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".webp")


def list_account_folders(base_dir: Path | str) -> List[AccountFolder]:
    base = Path(base_dir)
    if not base.is_dir():
        raise FileNotFoundError(f"Accounts folder not found: {base}")
    folders = [AccountFolder(name=p.name, path=p) for p in sorted(base.iterdir()) if p.is_dir()]
    logger.info(f"Loaded {len(folders)} accounts from {base.name}")
    return folders


def read_account_text(account_path: Path | str) -> str:
    """
    Concatenate every .txt file of an account folder.
    The empty `info.txt` template and receipts are skipped.
    """
    path = Path(account_path)
    chunks: List[str] = []
    for file in sorted(path.iterdir()):
        name = file.name.lower()
        if not file.is_file() or not name.endswith(".txt"):
            continue
        if name == ACCOUNT_TEMPLATE_FILE or is_receipt(file):
            logger.debug(f"Skipping {file.name}")
            continue
        content = file.read_text(encoding="utf-8", errors="replace")
        logger.debug(f"Read {len(content)} chars from {file.name}")
        chunks.append(content)

    text = "\n\n".join(chunks)
    if not text.strip():
        raise ValueError(f"No account text found in {path}")
    return text


def account_images(account_path: Path | str) -> List[Path]:
    path = Path(account_path)
    return [p for p in sorted(path.iterdir()) if p.suffix.lower() in IMAGE_SUFFIXES]


def is_receipt(file: Path) -> bool:
    try:
        head = file.read_text(encoding="utf-8", errors="replace")[:200]
    except OSError:
        return False
    return head.startswith("Offer ID:")


def write_receipt(account_path: Path | str, offer_id: str, when: Optional[datetime] = None) -> Path:
    """Drop `<offer_id>.txt` next to the account files once the offer is live."""
    stamp = (when or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    receipt = Path(account_path) / f"{offer_id}.txt"
    receipt.write_text(
        f"Offer ID: {offer_id}\nListed at: {stamp}\nStatus: {RECEIPT_STATUS}\n",
        encoding="utf-8",
    )
    logger.success(f"Receipt written to {receipt}")
    return receipt
