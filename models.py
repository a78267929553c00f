from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any, List

class RegistrationStatus(str, Enum):
    PENDING = "pending"
    ACTIVATED = "activated"
    REJECTED = "rejected"

# Core data model
class InstallationIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    site_url: str
    product_version: str
    platform_version: str
    runtime_version: str
    active_plugins: List[str] = []

class RegistrationState(BaseModel):
    status: Optional[str] = None  # None until the first install event
    activation_key: Optional[str] = None
    registered_at: Optional[int] = None
    request_id: Optional[str] = None

    @property
    def is_activated(self) -> bool:
        return self.status == RegistrationStatus.ACTIVATED.value

    @property
    def is_rejected(self) -> bool:
        return self.status == RegistrationStatus.REJECTED.value

class ReleaseInfo(BaseModel):
    tag_name: str
    version: str
    download_url: Optional[str] = None
    html_url: Optional[str] = None
    fetched_at: int
    raw: Dict[str, Any] = {}

class UpdateDescriptor(BaseModel):
    slug: str
    new_version: str
    info_url: Optional[str] = None
    download_url: Optional[str] = None

class HealthSnapshot(BaseModel):
    runtime_version: str
    platform_version: str
    product_version: str
    active_plugins: List[str]

# API models
class ActivationRequest(BaseModel):
    activationKey: str

class RegistrationStatusResponse(BaseModel):
    status: Optional[str] = None
    activated: bool
    rejected: bool = False
    hasActivationKey: bool
    requestId: Optional[str] = None
    registeredAt: Optional[int] = None
    pendingNoticeDue: bool = False

class FeatureCheckResponse(BaseModel):
    available: bool
    reason: Optional[str] = None

class UpdateCheckResponse(BaseModel):
    updateAvailable: bool
    currentVersion: str
    update: Optional[UpdateDescriptor] = None

class TriggerResponse(BaseModel):
    success: bool
    message: str

class HealthCheckResponse(BaseModel):
    status: str
    service: str
    version: str
    siteUrl: Optional[str] = None
    registrationStatus: Optional[str] = None
