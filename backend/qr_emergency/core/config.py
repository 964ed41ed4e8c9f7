from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    APP_NAME: str = "QR Emergency Alert System"
    VERSION: str = "1.0.0"

    # Deployment mode: serverless platforms (Netlify/Vercel) run stateless,
    # the auxiliary store then lives only for the process lifetime.
    STATELESS_MODE: bool = False
    DATABASE_URL: str = "sqlite:///./qr_emergency.db"

    # Only used to build absolute links (QR payload, photo secure URL)
    PUBLIC_BASE_URL: Optional[str] = None
    ALLOWED_ORIGIN: Optional[str] = None

    # Phone policy: "permissive" accepts any value with a digit in it,
    # "strict" requires PHONE_MIN_DIGITS..PHONE_MAX_DIGITS digits.
    PHONE_VALIDATION: str = "permissive"
    PHONE_MIN_DIGITS: int = 10
    PHONE_MAX_DIGITS: int = 13

    # None follows the deployment mode (mirror only when persistent)
    MIRROR_PROFILES_TO_STORE: Optional[bool] = None

    # Photo uploads
    UPLOAD_DIR: Optional[str] = None
    MAX_PHOTO_BYTES: int = 5 * 1024 * 1024

    # QR rendering
    QR_BOX_SIZE: int = 10
    QR_BORDER: int = 1

    RECENT_LOGS_DEFAULT: int = 10
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def mirror_profiles(self) -> bool:
        if self.MIRROR_PROFILES_TO_STORE is None:
            return not self.STATELESS_MODE
        return self.MIRROR_PROFILES_TO_STORE


settings = Settings()
