# config.py

from dotenv import load_dotenv
import os
from pathlib import Path

# Load .env file
load_dotenv()

# API endpoints
BASE_URL = os.getenv("G2G_API_BASE_URL", "https://sls.g2g.com").rstrip("/")
SITE_ORIGIN = os.getenv("G2G_SITE_ORIGIN", "https://www.g2g.com").rstrip("/")

REFRESH_PATH = "/user/refresh_access"
SEARCH_PATH = "/offer/search"
OFFER_PATH = "/offer"
SOFTPIN_PATH = "/inventory/softpin"
JOB_PATH = "/inventory/job"

# Catalog search and aggregation are slow on the remote side
REQUEST_TIMEOUT = float(os.getenv("G2G_REQUEST_TIMEOUT", "30"))

PACING_ENABLED = os.getenv("G2G_PACING_ENABLED", "1").strip().lower() not in ("0", "false", "no", "off")

# Token env fallback (settings file wins when present)
ENV_USER_ID = "G2G_USER_ID"
ENV_REFRESH_TOKEN = "G2G_REFRESH_TOKEN"
ENV_LONG_LIVED_TOKEN = "G2G_LONG_LIVED_TOKEN"
ENV_ACTIVE_DEVICE_TOKEN = "G2G_ACTIVE_DEVICE_TOKEN"

DATA_DIR = Path(os.getenv("G2G_DATA_DIR", "app_data"))
SETTINGS_PATH = Path(os.getenv("G2G_SETTINGS_PATH", str(DATA_DIR / "settings.json")))
CHAMPION_USAGE_PATH = Path(os.getenv("G2G_CHAMPION_USAGE_PATH", str(DATA_DIR / "champion_usage.json")))

LOG_LEVEL = os.getenv("G2G_LOG_LEVEL", "INFO")
LOG_DIR = Path(os.getenv("G2G_LOG_DIR", "logs"))


# ---- Browser fingerprint ----

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

SEC_CH_UA = '"Chromium";v="124", "Google Chrome";v="124", "Not-A.Brand";v="99"'
SEC_CH_UA_MOBILE = "?0"
SEC_CH_UA_PLATFORM = '"Windows"'

ACCEPT = "application/json, text/plain, */*"
ACCEPT_LANGUAGE = "en-US,en;q=0.9"
ACCEPT_ENCODING = "gzip, deflate, br"

# Sent as the Authorization value on unauthenticated calls
NULL_AUTHORIZATION = "null"

# Size of the raw-body excerpt carried by parse errors
PAYLOAD_PREVIEW_CHARS = 200


# ---- Pacing windows (milliseconds) ----

PRE_REFRESH_DELAY_MS = (1500, 2500)
PRE_SEARCH_DELAY_MS = (1000, 2000)
OFFER_STEP_DELAY_MS = (1500, 2500)
UPLOAD_STEP_DELAY_MS = (500, 1000)
BATCH_ITEM_DELAY_MS = (2000, 3500)


# ---- Catalog search ----

SEO_TERM = "league-of-legends-account"
SEARCH_SORT = "lowest_price"
SEARCH_PAGE_SIZE = 48
SEARCH_CURRENCY = "USD"
SEARCH_COUNTRY = "RU"

NO_OFFERS = "No offers"
ERROR_QUOTE = "Error"


# ---- Listing publisher ----

SUCCESS_CODE = 2000

# Fixed identifiers of the League of Legends accounts catalog
SERVICE_ID = "90ac7a0c-4ac1-4fa6-aa9b-1e4a0f2c5b8d"
BRAND_ID = "lgc_game_29076"
OFFER_TYPE = "public"
OFFER_CURRENCY = "USD"
DELIVERY_METHOD_IDS = ["auto_delivery"]
DELIVERY_SPEED = "instant"
SALES_TERRITORY = "global"
SOFTPIN_JOB_TYPE = "softpin_upload"
SCREENSHOT_IMAGE_NAME = "screenshot"


# ---- Local artifacts ----

RECEIPT_STATUS = "Live"
ACCOUNT_TEMPLATE_FILE = "info.txt"
TITLE_MAX_LENGTH = 128
