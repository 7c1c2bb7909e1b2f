from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # API Configuration
    APP_NAME: str = "PhishCheck"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging
    LOG_LEVEL: str = "INFO"

    # Document Intake
    MAX_FILE_SIZE_MB: int = 25

    # OCR (tesseract language codes)
    OCR_LANGUAGES: str = "spa+eng"
    OCR_FALLBACK_LANGUAGE: str = "eng"
    OCR_CONFIG: str = "--psm 6"

    # Risk Scoring Thresholds
    HIGH_RISK_THRESHOLD: int = 70
    MEDIUM_RISK_THRESHOLD: int = 40

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()

# Logging configuration
logging_config = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        },
    },
    'handlers': {
        'default': {
            'level': settings.LOG_LEVEL,
            'formatter': 'standard',
            'class': 'logging.StreamHandler',
        },
    },
    'loggers': {
        'phishcheck': {
            'handlers': ['default'],
            'level': settings.LOG_LEVEL,
            'propagate': True
        }
    }
}
