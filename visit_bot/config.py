import os
from dataclasses import dataclass

VARIANTS = ("visits", "directory")


@dataclass(frozen=True)
class Settings:
    token: str
    data_path: str = "visit_data"
    # "visits" keeps profiles on logout, "directory" removes them
    variant: str = "visits"
    log_level: str = "INFO"


def load_settings() -> Settings:
    token = os.getenv("DISCORD_BOT_TOKEN", "").strip()
    data_path = os.getenv("VISIT_DATA_DIR", "").strip() or "visit_data"
    variant = os.getenv("VISIT_VARIANT", "").strip().lower()
    if variant not in VARIANTS:
        variant = "visits"
    log_level = os.getenv("VISIT_LOG_LEVEL", "").strip() or "INFO"
    return Settings(
        token=token or "", data_path=data_path, variant=variant, log_level=log_level
    )
