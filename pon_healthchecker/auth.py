#!/usr/bin/env python3
"""
Device Login
Best-effort form login to the ONT before its admin pages are scraped
"""

import logging
import threading

import requests
import urllib3

from .models import Settings

urllib3.disable_warnings()

logger = logging.getLogger(__name__)


class DeviceLogin:
    """
    Fire-and-forget login.

    The response is discarded and every error is swallowed, health checking
    carries on without a session. Failures are logged and counted.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.failures = 0
        self.lock = threading.Lock()

        # The ONT serves a self-signed certificate
        self.session = requests.Session()
        self.session.verify = False
        self.session.trust_env = False

    def form(self) -> dict:
        return {
            "challenge": "",
            "username": self.settings.login_username,
            "password": self.settings.login_password,
            "save": "Login",
            "submit-url": "/admin/login.asp",
        }

    def login(self) -> bool:
        url = self.settings.login_url
        try:
            response = self.session.post(url, data=self.form(), timeout=self.settings.login_timeout)
            response.close()
        except requests.exceptions.RequestException as e:
            with self.lock:
                self.failures += 1
            logger.warning(f"Device login to {url} failed ({self.failures} so far): {e}")
            return False

        logger.debug(f"Device login to {url} returned HTTP {response.status_code}")
        return True
