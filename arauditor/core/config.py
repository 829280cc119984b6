"""Configuration management for the AR accessibility auditor."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Config(BaseSettings):
    """Configuration class for the auditor and its collaborators."""

    # Inference service
    openai_api_key: str = Field(default="", description="Static credential for the inference service")
    openai_base_url: Optional[str] = Field(default=None, description="Override for OpenAI-compatible endpoints")
    audit_model: str = Field(default="gpt-4o", description="Vision-language model used for audits")
    image_edit_model: str = Field(default="gpt-image-1", description="Model used to render remediations")
    advisor_model: str = Field(default="gpt-4o", description="Model backing the advisor chat")
    openai_max_tokens: int = Field(default=4000)
    openai_temperature: float = Field(default=0.2)
    inference_timeout: float = Field(default=90.0, description="Seconds before an inference call is abandoned")

    # Scan scheduling
    live_scan_period: float = Field(default=15.0, description="Seconds between live-mode scan attempts")
    silent_scan_cooldown: float = Field(default=12.0, description="Minimum seconds between silent scan starts")
    discard_stale_scans: bool = Field(default=False, description="Ignore completions older than the last applied scan")

    # Camera capture
    camera_index: int = Field(default=0)
    camera_width: int = Field(default=1920)
    camera_height: int = Field(default=1080)
    camera_fallback_width: int = Field(default=1280)
    camera_fallback_height: int = Field(default=720)
    jpeg_quality: int = Field(default=80)

    # Overlay geometry (normalized model output space)
    overlay_space: int = Field(default=1000)
    overlay_bracket_ratio: float = Field(default=0.2)
    overlay_panel_width: int = Field(default=400)
    overlay_panel_height: int = Field(default=450)

    # Persistence
    stats_path: str = Field(default="data/walkinmyshoes_stats.json")

    # Framework Configuration
    log_level: str = Field(default="INFO")
    logs_dir: str = Field(default="logs")
    save_vision_debug: bool = Field(default=False)
    vision_debug_dir: str = Field(default="vision_debug")

    # API Configuration
    api_host: str = Field(default="localhost")
    api_port: int = Field(default=8000)
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    class Config:
        """Pydantic configuration for environment loading."""

        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore unexpected env vars rather than raising errors

    def validate_config(self) -> bool:
        """Validate configuration values."""
        if self.live_scan_period <= 0 or self.silent_scan_cooldown <= 0:
            raise ValueError("Scan period and cooldown must be positive")

        if self.silent_scan_cooldown > self.live_scan_period:
            raise ValueError("Silent scan cooldown must not exceed the live scan period")

        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError("JPEG quality must be between 1 and 100")

        if self.overlay_space <= 0:
            raise ValueError("Overlay space must be positive")

        return True

    def get_stats_path(self) -> str:
        """Get the full path to the persisted stats blob."""
        return os.path.join(os.getcwd(), self.stats_path)


# Global configuration instance
try:
    config = Config()
except Exception as e:
    print(f"Warning: Could not load configuration: {e}")
    # Create a minimal config for basic functionality
    config = Config(openai_api_key="")
