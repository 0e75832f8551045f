from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    secret_key: str = "dev-secret-key-change-in-production"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"
    access_token_expire_minutes: int = 30

    # Security
    allowed_origins: str = "http://localhost:3000,http://localhost:5173,http://localhost"

    # Business calendar
    business_timezone: str = "America/New_York"
    business_open_hour: int = 8
    business_close_hour: int = 20            # inclusive: last bookable hour
    slot_minute_steps: str = "0,15,30,45"
    min_duration_minutes: int = 15
    max_duration_minutes: int = 480
    default_duration_minutes: int = 60

    # Booking backend (owns persistence + conflict detection)
    booking_backend_url: str = "http://localhost:5000"
    booking_backend_timeout: float = 10.0

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("text", "json"):
            raise ValueError("LOG_FORMAT must be 'text' or 'json'")
        return value

    @property
    def minute_steps(self) -> tuple[int, ...]:
        return tuple(sorted({int(m) for m in self.slot_minute_steps.split(",") if m.strip()}))

    @model_validator(mode="after")
    def _validate_business_calendar(self):
        if not 0 <= self.business_open_hour <= self.business_close_hour <= 23:
            raise ValueError(
                "Business hours must satisfy 0 <= BUSINESS_OPEN_HOUR <= BUSINESS_CLOSE_HOUR <= 23"
            )
        steps = self.minute_steps
        if not steps or any(m < 0 or m > 59 for m in steps):
            raise ValueError("SLOT_MINUTE_STEPS must be a non-empty list of minutes in 0..59")
        if not (
            self.min_duration_minutes
            <= self.default_duration_minutes
            <= self.max_duration_minutes
        ):
            raise ValueError(
                "Durations must satisfy MIN <= DEFAULT <= MAX"
            )
        return self

    @model_validator(mode="after")
    def _validate_production(self):
        if self.environment == "production":
            if self.secret_key == "dev-secret-key-change-in-production":
                raise ValueError(
                    "Production requires a non-default SECRET_KEY"
                )
            if self.booking_backend_url.startswith("http://localhost"):
                raise ValueError(
                    "Production must point BOOKING_BACKEND_URL at the real booking backend"
                )
        return self


settings = Settings()
