"""HTTP client for the tenant API and the SCIM identity API.

Covered:
- password-grant login against {base}/{tenant}/oauth2/token
- bearer-authenticated GET/POST on either API
- uniform failure contract: log and return None, never raise
"""

import logging
from typing import Any, Optional

import requests
from requests import RequestException

from config.defaults import TOKEN_ENDPOINT
from config.schema import ApiSession, LoginPrompt, SiteAddress, SyncConfig

logger = logging.getLogger(__name__)


class SyncError(RuntimeError):
    """Base error of the training unit sync."""


class AuthenticationError(SyncError):
    """Login failed; nothing else can run."""


def _describe_failure(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or resp.reason or "").strip()[:300]
    if isinstance(body, dict):
        for key in ("message", "Message", "error_description", "error", "detail"):
            if body.get(key):
                return str(body[key])
    return str(body)[:300]


def authenticate(
    login: LoginPrompt,
    config: SyncConfig,
    *,
    http: Optional[requests.Session] = None,
) -> ApiSession:
    """Exchanges user name and password for a session token.

    Raises:
        ValueError: the site URL cannot be split into host and tenant.
        AuthenticationError: the token endpoint refused or returned no token.
    """
    site = SiteAddress.parse(login.site_url)
    http = http or requests.Session()
    url = site.api_root + TOKEN_ENDPOINT
    form = {
        "grant_type": "password",
        "username": login.username,
        "password": login.password,
        "duration": config.token_duration,
    }
    try:
        resp = http.post(url, data=form, timeout=config.request_timeout_seconds)
    except RequestException as e:
        raise AuthenticationError(f"Could not reach {url}: {e}") from e

    if not 200 <= resp.status_code < 300:
        raise AuthenticationError(
            f"Login refused ({resp.status_code}): {_describe_failure(resp)}")
    try:
        token = resp.json().get("access_token")
    except (ValueError, AttributeError):
        token = None
    if not token:
        raise AuthenticationError("Login response contained no access_token")

    logger.info(f"Authenticated as {login.username} on tenant '{site.tenant}'")
    return ApiSession(
        site=site,
        access_token=token,
        api_key=login.api_key,
        scim_base_url=config.scim_base_url or site.base_url,
        timeout=config.request_timeout_seconds,
    )


class ApiClient:
    """Issues authenticated calls and returns parsed JSON, or None on failure.

    Callers cannot tell failure causes apart; the log line carries endpoint,
    status and message.
    """

    def __init__(self, session: ApiSession, *, http: Optional[requests.Session] = None):
        self.session = session
        self._http = http or requests.Session()

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Any] = None,
        *,
        params: Optional[dict[str, Any]] = None,
        secondary: bool = False,
    ) -> Optional[Any]:
        if secondary:
            root, credential = self.session.secondary_root, self.session.api_key
        else:
            root, credential = self.session.primary_root, self.session.access_token

        url = root + endpoint.lstrip("/")
        headers = {
            "Authorization": f"Bearer {credential}",
            "Accept": "application/json",
        }
        kwargs: dict[str, Any] = {"params": params, "headers": headers,
                                  "timeout": self.session.timeout}
        if body is not None:
            # requests serialises json= and sets the content type
            kwargs["json"] = body

        try:
            resp = self._http.request(method, url, **kwargs)
        except RequestException as e:
            logger.error(f"{method} {endpoint} failed: {e}")
            return None

        if not 200 <= resp.status_code < 300:
            logger.error(
                f"{method} {endpoint} failed ({resp.status_code}): {_describe_failure(resp)}")
            return None

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            logger.error(f"{method} {endpoint} returned a non-JSON body ({resp.status_code})")
            return None

    def get(self, endpoint: str, *, params: Optional[dict[str, Any]] = None,
            secondary: bool = False) -> Optional[Any]:
        return self.request(endpoint, "GET", params=params, secondary=secondary)

    def post(self, endpoint: str, body: Any, *, secondary: bool = False) -> Optional[Any]:
        return self.request(endpoint, "POST", body, secondary=secondary)
