# config.py
import os
from dataclasses import dataclass

from dotenv import load_dotenv

APP_NAME = "NeedyNeeds"

DELIVERY_FEE_PER_ITEM = 100
OAT_RATE = 28
FIXED_CHARGE = 150

TRANSPORT_MODES = (
    "Bus",
    "Taxi",
    "Post",
    "Keep at Shop",
)

ALL_BATCHES_LABEL = "All Batches"

ORDERS_KEY = "nn_orders"
COSTS_KEY = "nn_costs"

WEB_APP_URL_PREFIX = "https://script.google.com"


@dataclass
class Settings:
    remote_backend: str = ""
    web_app_url: str = ""
    spreadsheet_id: str = ""
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_schema: str = "public"
    local_data_dir: str = "data"
    sync_debounce_seconds: float = 2.0
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Read settings from the environment (and a .env file if present).
    """
    load_dotenv()

    try:
        debounce = float(os.getenv("SYNC_DEBOUNCE_SECONDS", "2.0"))
    except ValueError:
        debounce = 2.0

    return Settings(
        remote_backend=os.getenv("REMOTE_BACKEND", "").strip().lower(),
        web_app_url=os.getenv("WEB_APP_URL", "").strip(),
        spreadsheet_id=os.getenv("SPREADSHEET_ID", "").strip(),
        supabase_url=os.getenv("SUPABASE_URL", "").strip(),
        supabase_key=os.getenv("SUPABASE_KEY", "").strip(),
        supabase_schema=os.getenv("SCHEMA", "public").strip() or "public",
        local_data_dir=os.getenv("LOCAL_DATA_DIR", "data"),
        sync_debounce_seconds=debounce,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
