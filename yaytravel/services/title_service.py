# yaytravel/services/title_service.py

import requests
from datetime import date
from typing import Optional

from yaytravel.core.config_loader import settings
from yaytravel.core.logger import logger


def fallback_title(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"Trip Planning - {today.month}/{today.day}/{today.year}"


class TitleService:
    """Asks the external title API for a short conversation title."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or settings.TITLE_API_URL
        self.timeout = timeout or settings.request_timeout

    def generate_title(self, text: str) -> str:
        try:
            response = requests.post(self.url, json={"text": text}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error generating title: {e}")
            return fallback_title()

        if not response.ok:
            logger.error(f"Failed to generate title: {response.status_code} {response.reason}")
            return fallback_title()

        try:
            result = response.json()
        except ValueError:
            logger.error("Title API returned a non-JSON body")
            return fallback_title()

        if not isinstance(result, dict):
            return fallback_title()
        return result.get("title") or result.get("generated_title") or fallback_title()
