from dataclasses import dataclass
import logging
import os
from dotenv import load_dotenv


load_dotenv()


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    default_scale: str = os.getenv("GRADETRACK_DEFAULT_SCALE", "20")
    planned_label: str = os.getenv("GRADETRACK_PLANNED_LABEL", "Future evaluation")
    recent_limit: int = int(os.getenv("GRADETRACK_RECENT_LIMIT", "5"))
    log_level: str = os.getenv("GRADETRACK_LOG_LEVEL", "INFO")

    cors_allowed_origins: tuple[str, ...] = _split_csv(
        os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    )
    cors_allow_origin_regex: str = os.getenv(
        "CORS_ALLOW_ORIGIN_REGEX",
        r"^https?:\/\/(localhost|127\.0\.0\.1)(:\d+)?$",
    )


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
