"""
Test: Configuration Loading

Verifies that:
1. Config module loads correctly
2. Environment variables are read
3. Backend and model selection work
4. Path configuration is correct

Run: python tests/test_config.py
"""

import importlib
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import config


def _reload_with(**env):
    """Reload config with the given environment overrides; returns the originals."""
    originals = {key: os.environ.get(key) for key in env}
    for key, value in env.items():
        os.environ[key] = value
    importlib.reload(config)
    return originals


def _restore(originals):
    for key, value in originals.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
    importlib.reload(config)


def test_config_loading():
    print("=" * 60)
    print("TEST: Configuration Loading")
    print("=" * 60)
    print()

    # AI configuration
    print("AI Configuration:")
    print("-" * 40)
    print(f"  AI_BACKEND: {config.AI_BACKEND}")
    print(f"  SPARKSTUDIO_API_URL: {config.SPARKSTUDIO_API_URL}")
    print(f"  SPARKSTUDIO_API_KEY: {'***' + config.SPARKSTUDIO_API_KEY[-4:] if config.SPARKSTUDIO_API_KEY else 'Not set'}")
    print(f"  → Gemini model: {config.GEMINI_MODEL}")

    assert config.AI_BACKEND in ("sparkstudio", "gemini", "mock")
    assert config.GEMINI_MODEL in (config.GEMINI_FLASH_MODEL, config.GEMINI_PRO_MODEL)
    assert config.SPARKSTUDIO_API_VERSION == "1.0.0"
    print("✓ AI settings valid")

    # Supabase
    print()
    print("Supabase Configuration:")
    print("-" * 40)
    print(f"  SUPABASE_URL: {config.SUPABASE_URL or 'Not set'}")
    print(f"  SUPABASE_MEDIA_BUCKET: {config.SUPABASE_MEDIA_BUCKET}")
    assert config.SUPABASE_MEDIA_BUCKET
    assert config.AUTH_REDIRECT_URL
    if not (config.SUPABASE_URL and config.SUPABASE_ANON_KEY):
        print("⚠ Supabase not configured (set SUPABASE_URL and SUPABASE_ANON_KEY)")

    # Paths
    print()
    print("Path Configuration:")
    print("-" * 40)
    print(f"  PROJECT_ROOT: {config.PROJECT_ROOT}")
    print(f"  SKILLS_DIR: {config.SKILLS_DIR}")
    assert config.PROJECT_ROOT.exists()
    assert config.SKILLS_DIR.exists()
    assert config.OUTPUT_DIR.exists()
    print("✓ Paths exist")

    # Generation / controller settings
    print()
    print("Generation Settings:")
    print("-" * 40)
    print(f"  DEFAULT_TEMPERATURE: {config.DEFAULT_TEMPERATURE}")
    print(f"  DEFAULT_MAX_TOKENS: {config.DEFAULT_MAX_TOKENS}")
    print(f"  HISTORY_LIMIT: {config.HISTORY_LIMIT}")
    print(f"  RECENT_PROMPTS_LIMIT: {config.RECENT_PROMPTS_LIMIT}")
    assert config.DEFAULT_TEMPERATURE == 0.8
    assert config.DEFAULT_MAX_TOKENS == 500
    assert config.HISTORY_LIMIT == 50
    assert config.RECENT_PROMPTS_LIMIT == 10
    assert config.MAX_UPLOAD_BYTES == 10 * 1024 * 1024
    print("✓ Generation settings loaded")


def test_model_switching():
    print()
    print("=" * 60)
    print("TEST: Model Switching (Flash ↔ Pro)")
    print("=" * 60)
    print()

    originals = _reload_with(USE_PRO_MODEL="false")
    try:
        print(f"USE_PRO_MODEL=false → Model: {config.GEMINI_MODEL}")
        assert "flash" in config.GEMINI_MODEL

        os.environ["USE_PRO_MODEL"] = "true"
        importlib.reload(config)
        print(f"USE_PRO_MODEL=true → Model: {config.GEMINI_MODEL}")
        assert "pro" in config.GEMINI_MODEL
    finally:
        _restore(originals)
    print("✓ Model switching")


def test_backend_switching():
    originals = _reload_with(AI_BACKEND="Gemini")
    try:
        print(f"AI_BACKEND=Gemini → {config.AI_BACKEND}")
        assert config.AI_BACKEND == "gemini"
    finally:
        _restore(originals)
    print("✓ Backend name normalised")


def test_clients_require_credentials():
    saved = (config.SUPABASE_URL, config.GOOGLE_API_KEY)
    config.SUPABASE_URL = None
    config.GOOGLE_API_KEY = None
    try:
        for factory in (config.get_supabase_client, config.get_gemini_client):
            try:
                factory()
            except ValueError as e:
                print(f"  → {factory.__name__}: {e}")
            else:
                raise AssertionError(f"{factory.__name__} should need credentials")
    finally:
        config.SUPABASE_URL, config.GOOGLE_API_KEY = saved
    print("✓ Client factories refuse missing credentials")


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print(" CONFIGURATION TESTS")
    print("=" * 60 + "\n")

    failed = 0
    for test in [test_config_loading, test_model_switching, test_backend_switching, test_clients_require_credentials]:
        try:
            test()
        except AssertionError as e:
            failed += 1
            print(f"✗ {test.__name__} failed: {e}")

    print("\n" + "=" * 60)
    print(" FINAL RESULT")
    print("=" * 60)

    if failed == 0:
        print("\n✅ ALL TESTS PASSED\n")
        sys.exit(0)
    else:
        print("\n❌ SOME TESTS FAILED\n")
        sys.exit(1)
