import json
import logging
from typing import Callable, Optional

from config import Settings
from errors import ThemeManagerError
from http_client import HttpClient
from models import HealthSnapshot, InstallationIdentity

logger = logging.getLogger(__name__)


class HealthReporter:
    def __init__(
        self,
        http: HttpClient,
        settings: Settings,
        identity_provider: Callable[[], InstallationIdentity],
    ):
        self.http = http
        self.settings = settings
        self.identity_provider = identity_provider

    def build_snapshot(self, identity: Optional[InstallationIdentity] = None) -> HealthSnapshot:
        if identity is None:
            identity = self.identity_provider()
        return HealthSnapshot(
            runtime_version=identity.runtime_version,
            platform_version=identity.platform_version,
            product_version=identity.product_version,
            active_plugins=list(identity.active_plugins),
        )

    def send_daily_report(self) -> bool:
        """
        Send the health snapshot to the control plane.
        Failures are only logged; the next scheduled run is the retry.
        """
        identity = self.identity_provider()
        snapshot = self.build_snapshot(identity)
        payload = {
            "site_url": identity.site_url,
            "health_metrics": json.dumps(snapshot.model_dump()),
        }

        url = self.settings.admin_api_root + "update"
        try:
            result = self.http.post(
                url,
                data=payload,
                timeout=self.settings.REQUEST_TIMEOUT,
                headers={"Accept": "application/json"},
            )
        except ThemeManagerError as e:
            logger.error(f"Health report error: {e}")
            return False

        if not result.ok:
            logger.warning(f"Health report got HTTP {result.status_code} from {url}")
            return False

        logger.info("Health report sent")
        return True
