import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends

from config import get_settings
from logging_config import configure_logging
from triggers import ThemeManager, build_scheduler, get_theme_manager
from models import (
    ActivationRequest,
    RegistrationStatusResponse,
    FeatureCheckResponse,
    UpdateCheckResponse,
    TriggerResponse,
    HealthCheckResponse
)

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    manager = get_theme_manager()
    scheduler = build_scheduler(settings)
    scheduler.start()
    manager.ensure_daily_schedule(scheduler)
    logger.info("Theme manager started")
    try:
        yield
    finally:
        scheduler.shutdown(wait=False)

app = FastAPI(
    title="Theme Manager Client Service",
    description="Registration, update checks and health reporting for one theme installation",
    version="1.0.0",
    lifespan=lifespan
)

def _status_response(manager: ThemeManager) -> RegistrationStatusResponse:
    state = manager.registration.get_state()
    return RegistrationStatusResponse(
        status=state.status,
        activated=state.is_activated,
        rejected=state.is_rejected,
        hasActivationKey=bool(state.activation_key),
        requestId=state.request_id,
        registeredAt=state.registered_at,
        pendingNoticeDue=manager.registration.pending_notice_due()
    )

# Host triggers
@app.post("/api/theme/install", response_model=RegistrationStatusResponse)
def on_install(manager: ThemeManager = Depends(get_theme_manager)):
    """
    Theme installed or re-activated.

    Clears any activation key, marks registration pending and
    sends the registration request immediately.
    """
    manager.on_install()
    return _status_response(manager)

@app.post("/api/theme/admin-init", response_model=RegistrationStatusResponse)
def on_admin_context_enter(manager: ThemeManager = Depends(get_theme_manager)):
    """
    Admin page load. Retries registration while not activated,
    at most once per retry window.
    """
    manager.on_admin_context_enter()
    return _status_response(manager)

@app.get("/api/theme/update-check", response_model=UpdateCheckResponse)
def on_update_check(
    current_version: Optional[str] = None,
    manager: ThemeManager = Depends(get_theme_manager)
):
    """
    Host update check. Returns the update descriptor when the latest
    release is newer than the installed version.
    """
    version = current_version or manager.settings.THEME_VERSION
    update = manager.on_update_check(version)
    return {"updateAvailable": update is not None, "currentVersion": version, "update": update}

@app.post("/api/theme/health-report", response_model=TriggerResponse)
def send_health_report(manager: ThemeManager = Depends(get_theme_manager)):
    """
    Manually trigger the health report.

    Reports are sent automatically every 24 hours, but can be
    triggered manually for testing or immediate sync.
    """
    sent = manager.daily_timer()
    return {"success": sent, "message": "Health report sent" if sent else "Health report failed"}

# Registration
@app.post("/api/registration/activate", response_model=RegistrationStatusResponse)
def activate(request: ActivationRequest, manager: ThemeManager = Depends(get_theme_manager)):
    """
    Submit an activation key issued by the admin panel.
    """
    manager.registration.submit_activation(request.activationKey)
    return _status_response(manager)

@app.get("/api/registration/status", response_model=RegistrationStatusResponse)
def registration_status(manager: ThemeManager = Depends(get_theme_manager)):
    return _status_response(manager)

@app.get("/api/registration/feature-check", response_model=FeatureCheckResponse)
def feature_check(manager: ThemeManager = Depends(get_theme_manager)):
    """
    Gated features are available only once the installation is activated.
    """
    if manager.registration.is_activated():
        return {"available": True}
    if manager.registration.get_state().is_rejected:
        return {"available": False, "reason": "rejected"}
    return {"available": False, "reason": "not_activated"}

@app.get("/health", response_model=HealthCheckResponse)
def health_check(manager: ThemeManager = Depends(get_theme_manager)):
    """
    Health check endpoint for container orchestration.
    """
    return {
        "status": "healthy",
        "service": "theme-manager-client",
        "version": "1.0.0",
        "siteUrl": manager.settings.SITE_URL,
        "registrationStatus": manager.registration.get_state().status
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
