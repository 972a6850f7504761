from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    APP_ENV: str = "dev"
    SECRET_KEY: str
    JWT_EXPIRES_MIN: int = 1440
    LOG_LEVEL: str = "INFO"

    # DB
    DB_URL: str

    # Fuso orario di riferimento quando l'entità non ne dichiara uno
    APP_TIMEZONE: str = "Europe/Berlin"

    # Booking ledger ospitato (se vuoto si legge la tabella bookings locale)
    BOOKING_LEDGER_URL: str | None = None
    BOOKING_LEDGER_TOKEN: str | None = None
    BOOKING_LEDGER_TIMEOUT_SEC: float = 20.0

    # Finestra massima per una singola richiesta di resolve (giorni)
    MAX_RANGE_DAYS: int = 1096

    # Nome del calendario nell'export .ics
    CALENDAR_NAME: str = "Booking calendar"

    # Manutenzione: se true, le scritture rispondono 503
    MAINTENANCE_MODE: bool = False


settings = Settings()
