from pydantic import BaseModel
from dotenv import load_dotenv
import os
from pathlib import Path

# .env must be loaded before the Settings defaults are evaluated
load_dotenv()


DEFAULT_MODELS = "gemini-2.5-flash,gemini-2.0-flash,gemini-1.5-flash,gemini-1.5-pro"


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    output_dir: str = os.getenv("PROMPT3D_OUTPUT_DIR", "./output")
    cors_origins: list[str] = _split(os.getenv(
        "PROMPT3D_CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
    ))

    # Backend: gemini | local | hybrid | mock
    backend: str = os.getenv("PROMPT3D_BACKEND", "gemini").lower()

    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "").strip().strip('"').strip("'")
    # Fallback chain, tried in this order
    models: list[str] = _split(os.getenv("PROMPT3D_MODELS", DEFAULT_MODELS))

    local_model: str = os.getenv("PROMPT3D_LOCAL_MODEL", "Qwen/Qwen2.5-1.5B-Instruct")
    local_adapter: str = os.getenv("PROMPT3D_LOCAL_ADAPTER", "")

    openscad_cmd: str = os.getenv("OPENSCAD_CMD", "openscad")
    compile_timeout_s: float = float(os.getenv("PROMPT3D_COMPILE_TIMEOUT", "120"))
    generation_timeout_s: float = float(os.getenv("PROMPT3D_GENERATION_TIMEOUT", "60"))

    max_image_bytes: int = int(os.getenv("PROMPT3D_MAX_IMAGE_BYTES", str(20 * 1024 * 1024)))

    log_level: str = os.getenv("PROMPT3D_LOG_LEVEL", "INFO").upper()


settings = Settings()
Path(settings.output_dir).mkdir(parents=True, exist_ok=True)
