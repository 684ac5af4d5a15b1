"""Authentication configuration."""

from pydantic import BaseModel, Field, model_validator


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Durations are in their natural units: minutes for verification codes and
    rate-limit windows, days for sessions.
    """

    environment: str = Field(
        default="development",
        description="Deployment environment; 'production' hardens the settings below",
    )

    # Verification codes
    code_expiry_minutes: int = Field(
        default=10,
        description="How long an emailed verification code remains valid",
        ge=1,
        le=60,
    )
    allow_bypass_code: bool = Field(
        default=False,
        description="Accept bypass_code in place of the emailed code (never in production)",
    )
    bypass_code: str = Field(
        default="123456",
        pattern=r"^\d{6}$",
    )

    # Session settings
    session_expiry_days: int = Field(
        default=7,
        description="Session token lifetime in days",
        ge=1,
        le=30,
    )
    cookie_name: str = Field(default="session-token")
    cookie_secure: bool = Field(
        default=False,
        description="Set the Secure flag on the session cookie (always on in production)",
    )

    # Rate limiting
    rate_limit_attempts: int = Field(
        default=5,
        description="Max code requests or verification attempts per email per window",
        ge=1,
        le=20,
    )
    rate_limit_window_minutes: int = Field(
        default=15,
        description="Rate limit window duration",
        ge=1,
        le=60,
    )

    # Application
    app_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL used to build public menu links",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def bypass_enabled(self) -> bool:
        """Bypass code is only honoured outside production."""
        return self.allow_bypass_code and not self.is_production

    @model_validator(mode="after")
    def harden_production(self) -> "AuthConfig":
        """Production always gets Secure cookies and no bypass."""
        if self.is_production:
            self.allow_bypass_code = False
            self.cookie_secure = True
        return self
