"""Read-only UniFi controller client used to fetch live objects."""

import logging
from typing import Any

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import ClientConfig
from .models import LiveObject

logger = logging.getLogger(__name__)

UNIFI_OS_API_PATH = "/proxy/network"

# api_kind -> listing path below the API prefix; "{site}" is substituted
LIST_ENDPOINTS: dict[str, str] = {
    "client_device": "/api/s/{site}/rest/user",
    "client_group": "/api/s/{site}/rest/usergroup",
    "network": "/api/s/{site}/rest/networkconf",
    "wlan": "/api/s/{site}/rest/wlanconf",
    "dns_record": "/v2/api/site/{site}/static-dns",
    "firewall_zone": "/v2/api/site/{site}/firewall/zone",
    "firewall_policy": "/v2/api/site/{site}/firewall-policies",
}
SITES_ENDPOINT = "/api/self/sites"


class ControllerError(Exception):
    """Raised when the controller cannot be reached or answers with an error."""


class ControllerClient:
    """HTTP client for listing configuration objects on a UniFi controller."""

    DEFAULT_TIMEOUT = (10, 30)

    def __init__(self, config: ClientConfig):
        config.validate()
        self.config = config
        self.base_url = config.api_url.rstrip("/")
        self.api_path = ""
        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if config.api_key:
            self.session.headers["X-API-Key"] = config.api_key

        retry = Retry(
            total=3,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "POST"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        self.session.verify = not config.allow_insecure
        if config.allow_insecure:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def connect(self) -> None:
        """Discover the API path prefix and log in when using credentials."""
        self.api_path = self._discover_api_path()
        logger.debug(f"API path prefix: {self.api_path or '<none>'}")
        if not self.config.api_key:
            self._login()

    def _discover_api_path(self) -> str:
        # UniFi OS answers 200 on the root; legacy controllers redirect
        try:
            resp = self.session.get(self.base_url, allow_redirects=False, timeout=self.DEFAULT_TIMEOUT)
        except requests.RequestException as e:
            raise ControllerError(f"probing controller at {self.base_url}: {e}") from e
        return UNIFI_OS_API_PATH if resp.status_code == 200 else ""

    def _login(self) -> None:
        login_path = "/api/auth/login" if self.api_path == UNIFI_OS_API_PATH else "/api/login"
        url = f"{self.base_url}{login_path}"
        logger.debug(f"POST {url}")
        try:
            resp = self.session.post(
                url,
                json={"username": self.config.username, "password": self.config.password},
                timeout=self.DEFAULT_TIMEOUT,
            )
        except requests.RequestException as e:
            raise ControllerError(f"login failed: {e}") from e
        if resp.status_code != 200:
            raise ControllerError(f"login returned status {resp.status_code}")

        csrf = resp.headers.get("X-Updated-Csrf-Token") or resp.headers.get("X-Csrf-Token")
        if csrf:
            self.session.headers["X-Csrf-Token"] = csrf

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}{self.api_path}{path}"
        logger.debug(f"GET {url}")
        try:
            resp = self.session.get(url, timeout=self.DEFAULT_TIMEOUT)
            resp.raise_for_status()
            return resp.json() if resp.content else None
        except requests.RequestException as e:
            raise ControllerError(f"GET {path}: {e}") from e
        except ValueError as e:
            raise ControllerError(f"GET {path}: response is not JSON: {e}") from e

    @staticmethod
    def _unwrap(payload: Any) -> list[dict[str, Any]]:
        """v1 endpoints wrap results in {"meta": ..., "data": [...]}; v2 return the list."""
        if isinstance(payload, dict):
            payload = payload.get("data", [])
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ControllerError(f"unexpected response shape: {type(payload).__name__}")
        return [item for item in payload if isinstance(item, dict)]

    def list_objects(self, api_kind: str, site: str | None = None) -> list[dict[str, Any]]:
        """List raw objects of one kind on a site."""
        if api_kind not in LIST_ENDPOINTS:
            raise ValueError(f"no listing endpoint for '{api_kind}'")
        path = LIST_ENDPOINTS[api_kind].format(site=site or self.config.site)
        objects = self._unwrap(self._get(path))
        logger.info(f"Fetched {len(objects)} {api_kind} object(s)")
        return objects

    def list_live_objects(self, api_kind: str, site: str | None = None) -> list[LiveObject]:
        """List objects of one kind, tagged with the site they came from."""
        site = site or self.config.site
        return [LiveObject.from_api(raw, site) for raw in self.list_objects(api_kind, site)]

    def list_sites(self) -> list[str]:
        """Names of the sites visible to the authenticated user."""
        return [str(s.get("name", "")) for s in self._unwrap(self._get(SITES_ENDPOINT))]
