# google_client.py
import json
import logging
import os

from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]

DEFAULT_TOKEN_FILE = "token_sheets.json"


def _is_service_account_file(path: str) -> bool:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f).get("type") == "service_account"
    except (OSError, ValueError, AttributeError):
        return False


def get_credentials():
    """
    Credentials for the Sheets API from GOOGLE_CREDENTIALS_JSON.

    A service account key is used directly (headless). An OAuth client
    secrets file goes through the browser consent flow once; the resulting
    token is cached in GOOGLE_TOKEN_FILE and refreshed from there.
    """
    creds_json = os.getenv("GOOGLE_CREDENTIALS_JSON")
    token_file = os.getenv("GOOGLE_TOKEN_FILE", DEFAULT_TOKEN_FILE)

    if creds_json and _is_service_account_file(creds_json):
        return service_account.Credentials.from_service_account_file(creds_json, scopes=SCOPES)

    creds = None
    if os.path.exists(token_file):
        creds = Credentials.from_authorized_user_file(token_file, SCOPES)

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        logger.info("Refreshing cached Google token")
        creds.refresh(Request())
    else:
        if not creds_json:
            raise RuntimeError("GOOGLE_CREDENTIALS_JSON is not set in the environment")
        flow = InstalledAppFlow.from_client_secrets_file(creds_json, SCOPES)
        creds = flow.run_local_server(port=0)

    with open(token_file, "w") as token:
        token.write(creds.to_json())

    return creds


def get_sheets_service():
    creds = get_credentials()
    return build("sheets", "v4", credentials=creds, cache_discovery=False)
