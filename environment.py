import platform

from config import Settings
from models import InstallationIdentity

def get_runtime_version() -> str:
    return platform.python_version()

def get_installation_identity(settings: Settings) -> InstallationIdentity:
    """
    Snapshot of the installation as reported to the control plane.
    Taken fresh for every payload so configuration changes are picked up.
    """
    return InstallationIdentity(
        site_url=settings.SITE_URL,
        product_version=settings.THEME_VERSION,
        platform_version=settings.PLATFORM_VERSION,
        runtime_version=get_runtime_version(),
        active_plugins=list(settings.ACTIVE_PLUGINS),
    )
