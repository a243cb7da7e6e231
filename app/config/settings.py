from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin operations (user creation, passwords, credentials)

    # Power BI / Microsoft identity platform
    powerbi_authority_host: str = "https://login.microsoftonline.com"
    powerbi_scope: str = "https://analysis.windows.net/powerbi/api/.default"
    powerbi_api_url: str = "https://api.powerbi.com"
    powerbi_token_ttl_seconds: int = 3000  # access tokens are reused for 50 minutes
    powerbi_http_timeout: float = 30.0
    powerbi_default_rls_role: Optional[str] = None

    # App
    app_name: str = "bi-portal-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
