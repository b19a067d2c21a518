"""Resolves users between numeric ids and user names via the SCIM API."""

import logging
from typing import Optional

from pydantic import ValidationError

from config.defaults import SCIM_USER_ENDPOINT, SCIM_USERS_ENDPOINT
from models.identity import ScimListResponse, ScimUser

logger = logging.getLogger(__name__)


def _quote(value: str) -> str:
    """Escapes a value for a double-quoted SCIM filter string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


class IdentityResolver:
    """Looks users up in both directions and remembers answers for the run.

    Misses are cached too, so an unknown user costs one request per run.
    """

    def __init__(self, client):
        self.client = client
        self._names_by_id: dict[int, Optional[str]] = {}
        self._ids_by_name: dict[str, Optional[int]] = {}

    def username_for(self, user_id: int) -> Optional[str]:
        if user_id in self._names_by_id:
            return self._names_by_id[user_id]

        username = None
        data = self.client.request(
            SCIM_USER_ENDPOINT.format(user_id=user_id), "GET", secondary=True)
        if isinstance(data, dict):
            try:
                username = ScimUser.model_validate(data).user_name or None
            except ValidationError as e:
                logger.warning(f"Unexpected SCIM user shape for id {user_id}: {e}")

        self._names_by_id[user_id] = username
        if username is not None:
            self._ids_by_name.setdefault(username, user_id)
        return username

    def user_id_for(self, username: str) -> Optional[int]:
        """Exact ``userName eq`` match; the first result wins."""
        username = (username or "").strip()
        if not username:
            return None
        if username in self._ids_by_name:
            return self._ids_by_name[username]

        user_id = None
        data = self.client.request(
            SCIM_USERS_ENDPOINT, "GET",
            params={"filter": f'userName eq "{_quote(username)}"'},
            secondary=True,
        )
        if isinstance(data, dict):
            try:
                matches = ScimListResponse.model_validate(data).resources
            except ValidationError as e:
                logger.warning(f"Unexpected SCIM list shape for '{username}': {e}")
                matches = []
            if len(matches) > 1:
                logger.warning(
                    f"{len(matches)} users match '{username}', using the first")
            if matches:
                user_id = matches[0].numeric_id
                if user_id is None:
                    logger.warning(
                        f"User '{username}' has a non-numeric id: {matches[0].id!r}")

        self._ids_by_name[username] = user_id
        if user_id is not None:
            self._names_by_id.setdefault(user_id, username)
        return user_id
