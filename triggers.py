"""
Entry points the host environment calls.

    on_install              -> RegistrationManager.reset_and_register()
    on_admin_context_enter  -> RegistrationManager.maybe_retry_registration()
    on_update_check         -> ReleaseChecker.compute_update_descriptor()
    daily_timer             -> HealthReporter.send_daily_report()
"""
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

from config import Settings, get_settings
from database import init_db, make_engine, make_session_factory
from environment import get_installation_identity
from health_reporter import HealthReporter
from http_client import HttpClient
from models import UpdateDescriptor
from registration import RegistrationManager
from release_checker import ReleaseChecker
from state_store import StateStore

logger = logging.getLogger(__name__)

DAILY_HEALTH_JOB_ID = "theme_manager_daily_health"


class ThemeManager:
    def __init__(self, settings: Settings, store: StateStore, http: Optional[HttpClient] = None):
        self.settings = settings
        self.store = store
        self.http = http or HttpClient()

        def identity_provider():
            return get_installation_identity(self.settings)

        self.registration = RegistrationManager(self.store, self.http, self.settings, identity_provider)
        self.releases = ReleaseChecker(self.store, self.http, self.settings)
        self.health = HealthReporter(self.http, self.settings, identity_provider)

    def on_install(self) -> None:
        self.registration.reset_and_register()

    def on_admin_context_enter(self) -> bool:
        return self.registration.maybe_retry_registration()

    def on_update_check(self, current_version: Optional[str] = None) -> Optional[UpdateDescriptor]:
        return self.releases.compute_update_descriptor(current_version)

    def daily_timer(self) -> bool:
        return self.health.send_daily_report()

    def ensure_daily_schedule(self, scheduler: BaseScheduler) -> bool:
        """
        Schedule the daily health report unless the job already exists.
        Returns True when a job was added.
        """
        if scheduler.get_job(DAILY_HEALTH_JOB_ID) is not None:
            return False

        first_run = datetime.now(timezone.utc) + timedelta(seconds=self.settings.HEALTH_REPORT_FIRST_RUN_DELAY_SECONDS)
        scheduler.add_job(
            run_daily_health_report,
            'interval',
            hours=self.settings.HEALTH_REPORT_INTERVAL_HOURS,
            next_run_time=first_run,
            id=DAILY_HEALTH_JOB_ID,
            replace_existing=False,
        )
        logger.info(f"Daily health report scheduled, first run at {first_run.isoformat()}")
        return True


def build_theme_manager(settings: Settings) -> ThemeManager:
    engine = make_engine(settings.DATABASE_URL)
    init_db(engine)
    store = StateStore(make_session_factory(engine))
    return ThemeManager(settings, store)


@lru_cache()
def get_theme_manager() -> ThemeManager:
    return build_theme_manager(get_settings())


def run_daily_health_report() -> None:
    """Job target; referenced by name from the persistent job store."""
    get_theme_manager().daily_timer()


def build_scheduler(settings: Settings) -> BackgroundScheduler:
    """Scheduler whose jobs live in the application database, so the daily timer survives restarts."""
    return BackgroundScheduler(
        jobstores={"default": SQLAlchemyJobStore(url=settings.DATABASE_URL)},
        timezone="UTC",
    )
