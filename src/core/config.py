from typing import Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    # Empty string disables the rotating file handler
    log_dir: str = "logs"
    # Can be a comma-separated string or list
    cors_allowed_origins: Union[str, list[str]] = "http://localhost:3000"

    # Company block printed on every PDF report. Set in .env.
    company_name: str = "PRINTING PRESS ERP"
    company_address: str = "123 Print Avenue, Inktown, Philippines"
    company_phone: str = "+63 (2) 123-4567"
    company_email: str = "info@printingpresserp.com"
    report_footer_text: str = "© Printing Press ERP System. This is a system-generated report."
    report_author: str = "Printing Press ERP"

    # Generated files land here and are served by /reports/files/{filename}
    export_dir: str = "exports"

    # Hosted backend (PostgREST). When unset, callers must post the data bag themselves.
    data_source_url: str | None = None
    data_source_key: str | None = None
    data_source_timeout_seconds: float = 15.0

    @property
    def company_info(self) -> dict[str, str]:
        """One dict for PDF templates: company name and the joined contact line."""
        parts = [self.company_address, self.company_phone, self.company_email]
        return {
            "name": self.company_name,
            "contact_line": " • ".join(p for p in parts if p),
        }

    @property
    def use_data_source(self) -> bool:
        """True when the hosted backend is configured."""
        return bool(self.data_source_url and self.data_source_key)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @field_validator("data_source_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalize 'https://x.supabase.co/' to 'https://x.supabase.co'."""
        if isinstance(v, str):
            v = v.strip().rstrip("/")
            return v or None
        return v

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


settings = Settings()
