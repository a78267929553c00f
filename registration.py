import json
import logging
import re
import threading
from typing import Any, Callable, Dict, Optional

from config import Settings
from errors import MalformedResponseError, ThemeManagerError, UnexpectedStatusError
from http_client import HttpClient
from models import InstallationIdentity, RegistrationState, RegistrationStatus
from state_store import (
    OPTION_ACTIVATION_KEY,
    OPTION_REGISTRATION_REQUEST_ID,
    OPTION_REGISTRATION_STATUS,
    OPTION_REGISTRATION_TIME,
    TRANSIENT_LAST_REGISTRATION_ATTEMPT,
    StateStore,
)

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_text_field(value: Any) -> str:
    """Strip markup and control characters, collapse whitespace."""
    text = value if isinstance(value, str) else str(value)
    text = _TAG_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    text = _CONTROL_RE.sub("", text)
    return text.strip()


class RegistrationManager:
    """
    Owns the registration/activation state machine.

    Status moves unset -> pending on install, then to whatever the control
    plane reports. Ambiguous responses (non-200, undecodable body, missing
    status) never change the stored state.
    """

    def __init__(
        self,
        store: StateStore,
        http: HttpClient,
        settings: Settings,
        identity_provider: Callable[[], InstallationIdentity],
    ):
        self.store = store
        self.http = http
        self.settings = settings
        self.identity_provider = identity_provider
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def get_state(self) -> RegistrationState:
        registered_at = self.store.get_option(OPTION_REGISTRATION_TIME)
        return RegistrationState(
            status=self.store.get_option(OPTION_REGISTRATION_STATUS),
            activation_key=self.store.get_option(OPTION_ACTIVATION_KEY),
            registered_at=int(registered_at) if registered_at is not None else None,
            request_id=self.store.get_option(OPTION_REGISTRATION_REQUEST_ID),
        )

    def is_activated(self) -> bool:
        """Feature gate: true once the control plane has approved this installation."""
        state = self.get_state()
        return state.is_activated and bool(state.activation_key)

    def pending_notice_due(self) -> bool:
        """True when registration has been pending longer than PENDING_NOTICE_HOURS."""
        state = self.get_state()
        if state.status != RegistrationStatus.PENDING.value or not state.registered_at:
            return False
        return self.store.now() - state.registered_at > self.settings.PENDING_NOTICE_HOURS * 3600

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def reset_and_register(self) -> None:
        """Start over on install/activation of the theme."""
        with self._lock:
            self.store.delete_option(OPTION_ACTIVATION_KEY)
            self.store.update_option(OPTION_REGISTRATION_STATUS, RegistrationStatus.PENDING.value)
            self.store.update_option(OPTION_REGISTRATION_TIME, self.store.now())
            logger.info("Registration reset, status set to pending")
            self.send_registration_request()

    def maybe_retry_registration(self) -> bool:
        """
        Retry registration while not activated, at most once per
        REGISTRATION_RETRY_HOURS. Returns True when an attempt was made.
        """
        with self._lock:
            status = self.store.get_option(OPTION_REGISTRATION_STATUS)
            if status == RegistrationStatus.ACTIVATED.value:
                return False

            if self.store.get_transient(TRANSIENT_LAST_REGISTRATION_ATTEMPT) is not None:
                return False

            self.send_registration_request()
            self.store.set_transient(
                TRANSIENT_LAST_REGISTRATION_ATTEMPT,
                self.store.now(),
                self.settings.REGISTRATION_RETRY_HOURS * 3600,
            )
            return True

    def submit_activation(self, activation_key: str) -> RegistrationState:
        """
        Send a manually entered activation key to the control plane
        together with the stored request id.
        """
        with self._lock:
            payload = {
                "request_id": self.store.get_option(OPTION_REGISTRATION_REQUEST_ID) or "",
                "activation_key": sanitize_text_field(activation_key),
            }
            try:
                body = self._post_json("activate", payload)
                self._apply_response(body)
            except ThemeManagerError as e:
                logger.error(f"Activation request failed: {e}")
            return self.get_state()

    # ------------------------------------------------------------------
    # Control plane
    # ------------------------------------------------------------------

    def build_payload(self) -> Dict[str, str]:
        identity = self.identity_provider()
        return {
            "site_url": identity.site_url,
            "product_version": identity.product_version,
            "platform_version": identity.platform_version,
            "plugins": json.dumps(identity.active_plugins),
            "runtime_version": identity.runtime_version,
        }

    def send_registration_request(self) -> bool:
        """
        POST the registration payload and apply the response.
        Returns True when the stored state was updated.
        """
        try:
            body = self._post_json("register", self.build_payload())
            self._apply_response(body)
        except UnexpectedStatusError as e:
            logger.warning(f"Registration response ignored: {e}")
            return False
        except MalformedResponseError as e:
            logger.warning(f"Registration response ignored: {e}")
            return False
        except ThemeManagerError as e:
            logger.error(f"Registration error: {e}")
            return False

        logger.info(f"Registration status is now {self.store.get_option(OPTION_REGISTRATION_STATUS)!r}")
        return True

    def _post_json(self, endpoint: str, payload: Dict[str, str]) -> Dict[str, Any]:
        url = self.settings.admin_api_root + endpoint
        result = self.http.post(
            url,
            data=payload,
            timeout=self.settings.REQUEST_TIMEOUT,
            headers={"Accept": "application/json"},
        )
        if result.status_code != 200:
            raise UnexpectedStatusError(result.status_code, url)

        body = result.json()
        if not isinstance(body, dict):
            raise MalformedResponseError(f"Expected a JSON object from {url}")
        return body

    def _apply_response(self, body: Dict[str, Any]) -> None:
        status = body.get("status")
        if not isinstance(status, str) or not status:
            raise MalformedResponseError("Response has no status")

        self.store.update_option(OPTION_REGISTRATION_STATUS, status)

        request_id = body.get("request_id")
        if request_id is not None and request_id != "":
            self.store.update_option(OPTION_REGISTRATION_REQUEST_ID, str(request_id))

        # activation_key exists only alongside an activated status
        key = None
        if status == RegistrationStatus.ACTIVATED.value and body.get("activation_key") is not None:
            key = sanitize_text_field(body["activation_key"]) or None

        if key:
            self.store.update_option(OPTION_ACTIVATION_KEY, key)
        else:
            self.store.delete_option(OPTION_ACTIVATION_KEY)
