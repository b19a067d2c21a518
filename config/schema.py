from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from urllib.parse import urlparse


# ─── SETTINGS (persisted in config/sync_config.yaml) ───

class SyncConfig(BaseModel):
    """Non-secret settings. Passwords and API keys are never stored here."""
    # Site URL including the tenant segment, e.g. "https://acme.example.com/acme"
    site_url: Optional[str] = None
    # Default login name offered at the username prompt
    username: Optional[str] = None
    # Base URL of the SCIM identity API (None = scheme+host of site_url)
    scim_base_url: Optional[str] = None
    # Page size for Training/Register/ListPage
    page_size: int = Field(50, ge=1, le=500,
        description="Page size of the training register list")
    # Page size for Training/Trainee
    trainee_page_size: int = Field(100, ge=1, le=500,
        description="Page size of the trainee list")
    # Target directory for TrainingUnits_Export_<YYYYMMDD>.csv
    export_dir: str = "."
    # Token lifetime requested with the password grant
    token_duration: int = Field(60000, ge=1)
    # None = no timeout (requests default)
    request_timeout_seconds: Optional[float] = Field(None, gt=0)

    @field_validator("site_url", "scim_base_url")
    @classmethod
    def _strip_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


# ─── SESSION (built once after login) ───

class SiteAddress(BaseModel):
    """Site URL split into the host root and the tenant path segment."""
    model_config = ConfigDict(frozen=True)

    base_url: str
    tenant: str

    @classmethod
    def parse(cls, site_url: str) -> "SiteAddress":
        parsed = urlparse((site_url or "").strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(
                f"Site URL must look like https://host/<tenant>: {site_url!r}")
        segments = [s for s in parsed.path.split("/") if s]
        if not segments:
            raise ValueError(f"Site URL has no tenant segment: {site_url!r}")
        return cls(base_url=f"{parsed.scheme}://{parsed.netloc}", tenant=segments[0])

    @property
    def api_root(self) -> str:
        return f"{self.base_url}/{self.tenant}/"


class ApiSession(BaseModel):
    """Resolved endpoints and credentials, fixed after authentication."""
    model_config = ConfigDict(frozen=True)

    site: SiteAddress
    # Bearer token for the tenant API
    access_token: str
    # Bearer credential for the SCIM API
    api_key: str
    scim_base_url: str
    timeout: Optional[float] = None

    @property
    def primary_root(self) -> str:
        return self.site.api_root

    @property
    def secondary_root(self) -> str:
        return self.scim_base_url.rstrip("/") + "/"


class LoginPrompt(BaseModel):
    """Answers collected at the interactive login prompts."""
    model_config = ConfigDict(frozen=True)

    site_url: str
    username: str
    password: str = Field(repr=False)
    api_key: str = Field(repr=False)
