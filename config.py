"""
Configuration for SparkStudio.

AI Backends:
- Default: SparkStudio content API (SPARKSTUDIO_API_KEY)
- Optional: Gemini (set AI_BACKEND=gemini, GOOGLE_API_KEY)

Persistence:
- Supabase project (SUPABASE_URL + SUPABASE_ANON_KEY)
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# =============================================================================
# AI Service Configuration
# =============================================================================

# Which content generator the server wires in: "sparkstudio", "gemini" or "mock"
AI_BACKEND = os.getenv("AI_BACKEND", "sparkstudio").lower()

# SparkStudio content API
SPARKSTUDIO_API_URL = os.getenv("SPARKSTUDIO_API_URL", "https://api.sparkstudio.ai/v1")
SPARKSTUDIO_API_KEY = os.getenv("SPARKSTUDIO_API_KEY")
SPARKSTUDIO_API_VERSION = "1.0.0"
AI_REQUEST_TIMEOUT_SECONDS = int(os.getenv("AI_REQUEST_TIMEOUT_SECONDS", "30"))

# Gemini (alternative backend)
USE_PRO_MODEL = os.getenv("USE_PRO_MODEL", "false").lower() == "true"
GEMINI_FLASH_MODEL = "gemini-3-flash-preview"
GEMINI_PRO_MODEL = "gemini-3-pro-preview"
GEMINI_MODEL = GEMINI_PRO_MODEL if USE_PRO_MODEL else GEMINI_FLASH_MODEL
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-3-pro-image-preview")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")

# =============================================================================
# Supabase Configuration
# =============================================================================

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
SUPABASE_MEDIA_BUCKET = os.getenv("SUPABASE_MEDIA_BUCKET", "creative_media")
AUTH_REDIRECT_URL = os.getenv("AUTH_REDIRECT_URL", "sparkstudio://login-callback")


def get_gemini_client():
    """Get a Gemini client for the gemini backend."""
    from google import genai

    if not GOOGLE_API_KEY:
        raise ValueError(
            "GOOGLE_API_KEY not set. Set GOOGLE_API_KEY to use AI_BACKEND=gemini."
        )
    return genai.Client(api_key=GOOGLE_API_KEY)


def get_supabase_client():
    """
    Create a Supabase client from SUPABASE_URL / SUPABASE_ANON_KEY.

    Raises ValueError when the project is not configured.
    """
    from supabase import create_client

    if not (SUPABASE_URL and SUPABASE_ANON_KEY):
        raise ValueError(
            "SUPABASE_URL / SUPABASE_ANON_KEY not set. "
            "Both are required to talk to the SparkStudio database."
        )
    return create_client(SUPABASE_URL, SUPABASE_ANON_KEY)


# =============================================================================
# Paths
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.resolve()  # Always absolute
ASSETS_DIR = PROJECT_ROOT / "assets"
# Always resolve OUTPUT_DIR relative to PROJECT_ROOT, not CWD
_output_env = os.getenv("OUTPUT_DIR")
if _output_env:
    OUTPUT_DIR = (PROJECT_ROOT / _output_env).resolve()
else:
    OUTPUT_DIR = ASSETS_DIR / "outputs"
SKILLS_DIR = PROJECT_ROOT / "skills"
LOGS_DIR = PROJECT_ROOT / "logs"

# Ensure directories exist
for dir_path in [OUTPUT_DIR]:
    dir_path.mkdir(parents=True, exist_ok=True)

# =============================================================================
# Generation Settings
# =============================================================================

DEFAULT_STYLE = "creative"
DEFAULT_TEMPERATURE = 0.8
DEFAULT_MAX_TOKENS = 500
DEFAULT_MODEL_ID = "llama-3-70b"

# Variations walk the temperature upward from this base
VARIATION_BASE_TEMPERATURE = 0.7
VARIATION_TEMPERATURE = 0.9
VARIATION_DELAY_SECONDS = 0.2
BATCH_DELAY_SECONDS = 0.1

IMAGE_MODEL_ID = "dall-e-3"
IMAGE_SIZE = "1024x1024"
IMAGE_QUALITY = "standard"

# =============================================================================
# Controller Settings
# =============================================================================

HISTORY_LIMIT = 50
RECENT_PROMPTS_LIMIT = 10

# =============================================================================
# Upload Settings
# =============================================================================

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

# Max retries for Gemini calls
MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 2

# =============================================================================
# Logging
# =============================================================================

import logging

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# =============================================================================
# Print Configuration (for debugging)
# =============================================================================


def print_config():
    """Print current configuration for debugging."""
    print(f"""
SparkStudio Configuration
=========================
AI Backend: {AI_BACKEND}
Content API: {SPARKSTUDIO_API_URL} {"(key set)" if SPARKSTUDIO_API_KEY else "(no key)"}
Gemini Model: {GEMINI_MODEL} {"(Pro)" if USE_PRO_MODEL else "(Flash)"}
Supabase: {SUPABASE_URL or "Not set"}
Media Bucket: {SUPABASE_MEDIA_BUCKET}
Project Root: {PROJECT_ROOT}
Output Dir: {OUTPUT_DIR}
Log Level: {LOG_LEVEL}
""")


if __name__ == "__main__":
    print_config()
