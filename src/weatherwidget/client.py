# OOP boundary for external i/o
# all http/keys live here, so parsing and the widget stay pure and testable
# use a thread-local session per ThreadPoolExecutor worker, the widget runs requests off the caller thread

from __future__ import annotations
import logging
import threading
from typing import Any, Dict
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from .config import Settings
from .models import FORECAST_DAYS, ErrorKind, Query

logger = logging.getLogger(__name__)


class WeatherAPIError(RuntimeError):
    # base for everything this layer raises, kind drives the user-facing message
    kind = ErrorKind.NETWORK_FAILURE


class NetworkFailureError(WeatherAPIError):
    kind = ErrorKind.NETWORK_FAILURE


class ConfigurationMissingError(NetworkFailureError):
    # a missing key is a transport-class fault, reported under its own kind
    kind = ErrorKind.CONFIGURATION_MISSING


class InvalidResponseError(WeatherAPIError):
    kind = ErrorKind.INVALID_RESPONSE


class WeatherAPIClient:
    # this class encapsulates provider details like base URL, params, auth
    FORECAST_PATH = "/forecast.json"

    def __init__(self, settings: Settings):
        self.settings = settings
        self.url = settings.base_url.rstrip("/") + self.FORECAST_PATH

        # each worker thread lazily obtains its own session through _session()
        self._local = threading.local()

        # one attempt per call, failures are terminal and reported to the user
        self._retry = Retry(total=0, raise_on_status=False)

    def _build_session(self) -> requests.Session:
        # central place to configure http behavior like headers and adapters
        s = requests.Session()
        s.headers.update({"User-Agent": self.settings.user_agent})
        adapter = HTTPAdapter(max_retries=self._retry)
        s.mount("http://", adapter)
        s.mount("https://", adapter)
        return s

    def _session(self) -> requests.Session:
        # thread-local session creation
        sess = getattr(self._local, "session", None)
        if sess is None:
            sess = self._build_session()
            self._local.session = sess
        return sess

    def build_params(self, query: Query) -> Dict[str, Any]:
        if not self.settings.api_key:
            raise ConfigurationMissingError("WEATHERAPI_KEY not set")
        return {
            "key": self.settings.api_key,
            "q": query.serialize(),
            "days": FORECAST_DAYS,
            "aqi": "no",
            "alerts": "no",
        }

    def get_forecast(self, query: Query) -> Dict[str, Any]:
        # fetch forecast JSON, the caller validates the shape in service.parse_snapshot
        params = self.build_params(query)
        q = params["q"]
        logger.debug("requesting forecast for %r", q)

        try:
            resp = self._session().get(self.url, params=params, timeout=self.settings.timeout)
        except (requests.RequestException, ValueError) as exc:
            # ValueError covers text requests cannot encode into the url (UnicodeEncodeError)
            raise NetworkFailureError(f"Request error for {q!r}: {exc}") from exc

        if resp.status_code >= 400:
            # body is not parsed on failure, a short snippet is enough for triage
            snippet = (resp.text or "")[:300]
            raise NetworkFailureError(f"HTTP {resp.status_code} for {q!r}. Body: {snippet}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise InvalidResponseError(f"Invalid JSON for {q!r}: {exc}") from exc

        if not isinstance(data, dict):
            raise InvalidResponseError(f"Unexpected API shape for {q!r}: top level is not an object")

        logger.debug("forecast for %r received (HTTP %s)", q, resp.status_code)
        return data
