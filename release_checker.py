import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from config import Settings
from errors import MalformedResponseError, ThemeManagerError, UnexpectedStatusError
from http_client import HttpClient
from models import ReleaseInfo, UpdateDescriptor
from state_store import TRANSIENT_LATEST_RELEASE, StateStore
from versioning import build_update_descriptor, normalize_version

logger = logging.getLogger(__name__)


class ReleaseChecker:
    def __init__(self, store: StateStore, http: HttpClient, settings: Settings):
        self.store = store
        self.http = http
        self.settings = settings

    @property
    def latest_release_url(self) -> str:
        return f"{self.settings.GITHUB_API_URL.rstrip('/')}/repos/{self.settings.GITHUB_REPO}/releases/latest"

    def get_latest_release(self) -> Optional[ReleaseInfo]:
        """
        Latest release, served from the cache while it is fresh.

        An expired entry is never returned: when the refresh fails the
        result is None.
        """
        cached = self.store.get_transient(TRANSIENT_LATEST_RELEASE)
        if cached is not None:
            try:
                return ReleaseInfo.model_validate(cached)
            except ValueError:
                logger.warning("Discarding unreadable cached release")

        try:
            release = self._to_release_info(self._fetch_latest_release())
        except ThemeManagerError as e:
            logger.error(f"GitHub release fetch error: {e}")
            return None

        self.store.set_transient(
            TRANSIENT_LATEST_RELEASE,
            release.model_dump(),
            self.settings.RELEASE_CACHE_HOURS * 3600,
        )
        logger.info(f"Cached latest release {release.tag_name}")
        return release

    def compute_update_descriptor(self, current_version: Optional[str] = None) -> Optional[UpdateDescriptor]:
        """Describe the available update, or None when the installed version is current."""
        if current_version is None:
            current_version = self.settings.THEME_VERSION
        return build_update_descriptor(self.get_latest_release(), current_version, self.settings.THEME_SLUG)

    def _fetch_latest_release(self) -> Dict[str, Any]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.settings.GITHUB_TOKEN:
            headers["Authorization"] = f"token {self.settings.GITHUB_TOKEN}"

        url = self.latest_release_url
        result = self.http.get(url, timeout=self.settings.REQUEST_TIMEOUT, headers=headers)
        if result.status_code != 200:
            raise UnexpectedStatusError(result.status_code, url)

        body = result.json()
        if not isinstance(body, dict) or not body.get("tag_name"):
            raise MalformedResponseError("Release has no tag_name")
        return body

    def _to_release_info(self, body: Dict[str, Any]) -> ReleaseInfo:
        tag = body["tag_name"]
        if not isinstance(tag, str):
            raise MalformedResponseError("Release tag_name is not a string")
        try:
            return ReleaseInfo(
                tag_name=tag,
                version=normalize_version(tag),
                download_url=body.get("zipball_url") or body.get("download_url"),
                html_url=body.get("html_url"),
                fetched_at=self.store.now(),
                raw=body,
            )
        except ValidationError as e:
            raise MalformedResponseError(f"Release has invalid fields: {e}") from e
