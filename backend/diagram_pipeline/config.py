import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


LOG_LEVEL = os.getenv("DIAGRAM_LOG_LEVEL", "INFO")

# Preprocessor
DEFAULT_FLOW_DIRECTION = os.getenv("DIAGRAM_DEFAULT_FLOW_DIRECTION", "TD")

# Connection optimizer
HUB_DEGREE_THRESHOLD = int(os.getenv("DIAGRAM_HUB_DEGREE_THRESHOLD", "3"))
COMPLEX_CONNECTION_THRESHOLD = int(os.getenv("DIAGRAM_COMPLEX_CONNECTION_THRESHOLD", "5"))

# Rendering engine: "kroki" | "mmdc"
RENDER_ENGINE = os.getenv("DIAGRAM_RENDER_ENGINE", "kroki")
KROKI_BASE_URL = os.getenv("KROKI_BASE_URL", "https://kroki.io")
MMDC_PATH = os.getenv("MMDC_PATH", "mmdc")
RENDER_TIMEOUT_SECONDS = float(os.getenv("DIAGRAM_RENDER_TIMEOUT", "30"))

# Grammar check through the Mermaid CLI when it is installed
GRAMMAR_CHECK_ENABLED = _env_bool("DIAGRAM_GRAMMAR_CHECK", True)
GRAMMAR_CHECK_TIMEOUT_SECONDS = float(os.getenv("DIAGRAM_GRAMMAR_TIMEOUT", "15"))

# Error-node janitor
PURGE_INTERVAL_SECONDS = float(os.getenv("DIAGRAM_PURGE_INTERVAL", "0.2"))
PURGE_MAX_SWEEPS = int(os.getenv("DIAGRAM_PURGE_MAX_SWEEPS", "300"))
PURGE_CLEAN_DOCUMENT = _env_bool("DIAGRAM_PURGE_CLEAN_DOCUMENT", True)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("DIAGRAM_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
