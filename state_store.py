import time
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session, sessionmaker

from database import SystemConfig, TransientCache

# Durable option keys
OPTION_ACTIVATION_KEY = "activation_key"
OPTION_REGISTRATION_STATUS = "registration_status"
OPTION_REGISTRATION_TIME = "registration_time"
OPTION_REGISTRATION_REQUEST_ID = "registration_request_id"

# Ephemeral cache keys
TRANSIENT_LAST_REGISTRATION_ATTEMPT = "last_registration_attempt"
TRANSIENT_LATEST_RELEASE = "cached_latest_release"


class StateStore:
    """
    Key-value state shared by every component of one installation.

    Options persist until overwritten or deleted. Transients carry an
    expiry and are reported as absent once it has passed; they are
    overwritten on the next set rather than deleted.
    """

    def __init__(self, session_factory: sessionmaker, clock: Callable[[], float] = time.time):
        self._session_factory = session_factory
        self._clock = clock

    def now(self) -> int:
        return int(self._clock())

    def _session(self) -> Session:
        return self._session_factory()

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def get_option(self, key: str, default: Any = None) -> Any:
        db = self._session()
        try:
            row = db.query(SystemConfig).filter(SystemConfig.key == key).first()
            if row is None:
                return default
            return row.value
        finally:
            db.close()

    def update_option(self, key: str, value: Any) -> None:
        db = self._session()
        try:
            row = db.query(SystemConfig).filter(SystemConfig.key == key).first()
            if row:
                row.value = value
            else:
                db.add(SystemConfig(key=key, value=value))
            db.commit()
        finally:
            db.close()

    def delete_option(self, key: str) -> None:
        db = self._session()
        try:
            db.query(SystemConfig).filter(SystemConfig.key == key).delete()
            db.commit()
        finally:
            db.close()

    # ------------------------------------------------------------------
    # Transients
    # ------------------------------------------------------------------

    def get_transient(self, key: str) -> Optional[Any]:
        db = self._session()
        try:
            row = db.query(TransientCache).filter(TransientCache.key == key).first()
            if row is None or row.expires_at <= self.now():
                return None
            return row.value
        finally:
            db.close()

    def set_transient(self, key: str, value: Any, ttl_seconds: int) -> None:
        expires_at = self.now() + int(ttl_seconds)
        db = self._session()
        try:
            row = db.query(TransientCache).filter(TransientCache.key == key).first()
            if row:
                row.value = value
                row.expires_at = expires_at
            else:
                db.add(TransientCache(key=key, value=value, expires_at=expires_at))
            db.commit()
        finally:
            db.close()
