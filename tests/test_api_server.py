"""
Test: API Server

Exercises the FastAPI app in-process with TestClient. Services are
pre-set on app.state so no API keys or Supabase project are needed.

Run: python tests/test_api_server.py
"""

import sys
from pathlib import Path

from fastapi.testclient import TestClient
from supabase import PostgrestAPIError

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from agent.controller import AIController
from data import ChallengeRepository, SubmissionRepository
from skills import ChallengeGenerator, MockContentGenerator
from ui import api_server as api_module
from ui.api_server import app
from fakes import FakeAIService, FakeSupabase, make_user, prompt_row, rate_limited, submission_row

SERVICES = [
    "ai_service",
    "controller",
    "challenge_generator",
    "challenge_repository",
    "submission_repository",
    "user_client_factory",
]
AUTH = {"Authorization": "Bearer access-token"}


def make_client(service=None, supabase=None) -> TestClient:
    """Fresh app state wired to fakes."""
    for name in SERVICES:
        setattr(app.state, name, None)

    service = service or FakeAIService()
    supabase = supabase or FakeSupabase()
    app.state.ai_service = service
    app.state.controller = AIController(service)
    app.state.challenge_generator = ChallengeGenerator(service)
    app.state.challenge_repository = ChallengeRepository(supabase)
    app.state.submission_repository = SubmissionRepository(supabase)
    app.state.user_client_factory = lambda token: supabase
    return TestClient(app)


def db_down() -> PostgrestAPIError:
    return PostgrestAPIError({"message": "connection refused", "code": "08006"})


# =============================================================================
# Health / metadata
# =============================================================================


def test_health_and_skills():
    print("=" * 60)
    print("TEST: health and skills")
    print("=" * 60)

    client = make_client()
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    names = [s["name"] for s in client.get("/api/skills").json()["skills"]]
    print(f"  → skills: {names}")
    assert "generate_content" in names
    assert "generate_challenge" in names
    print("✓ Health and skills")


# =============================================================================
# AI generation
# =============================================================================


def test_generate():
    print("=" * 60)
    print("TEST: /api/generate")
    print("=" * 60)

    client = make_client()
    response = client.post("/api/generate", json={"prompt": "A cat in space", "style": "story"})
    assert response.status_code == 200
    body = response.json()
    assert body["content"] == "Generated text: A cat in space"
    assert body["tokens_used"] == 42

    state = client.get("/api/ai/state").json()
    assert state["recent_prompts"] == ["A cat in space"]
    assert len(state["history"]) == 1
    assert state["is_generating"] is False

    cleared = client.delete("/api/ai/history").json()
    assert cleared["history"] == []
    assert cleared["recent_prompts"] == ["A cat in space"]
    assert client.delete("/api/ai/recent-prompts").json()["recent_prompts"] == []
    print("✓ Generate, state and clearing")


def test_generate_rejections():
    client = make_client()

    response = client.post("/api/generate", json={"prompt": "hi"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Prompt must be at least 5 characters long"

    response = client.post("/api/generate", json={"prompt": "A cat in space", "temperature": 3})
    assert response.status_code == 422

    response = client.post("/api/generate/variations", json={"prompt": "A cat in space", "count": 9})
    assert response.status_code == 422

    response = client.post("/api/generate/ideas", json={"theme": "   "})
    assert response.status_code == 400

    limited = make_client(service=FakeAIService(error=rate_limited()))
    response = limited.post("/api/generate", json={"prompt": "A cat in space"})
    print(f"  → rate limited: {response.status_code} {response.json()}")
    assert response.status_code == 429
    assert limited.get("/api/ai/state").json()["error"] == "AIException[RATE_LIMITED]: Too many requests"
    print("✓ Invalid prompts and AI errors")


def test_helpers():
    client = make_client()

    variations = client.post("/api/generate/variations", json={"prompt": "A foggy harbour", "count": 2}).json()
    assert [v["content"] for v in variations["variations"]] == ["variation 0", "variation 1"]

    image = client.post("/api/generate/image", json={"prompt": "A foggy harbour", "style": "anime"}).json()
    assert image == {"url": "https://images.test/anime.png"}

    ideas = client.post("/api/generate/ideas", json={"theme": "autumn", "count": 2}).json()
    assert ideas == {"ideas": ["autumn idea 1", "autumn idea 2"]}

    enhanced = client.post("/api/generate/enhance", json={"text": "short"})
    assert enhanced.status_code == 400
    print("✓ Variations, image, ideas, enhance validation")


def test_mock_backend():
    client = make_client(service=MockContentGenerator())

    body = client.post("/api/generate", json={"prompt": "A dragon bakery"}).json()
    assert "A dragon bakery" in body["content"]
    assert body["tokens_used"] == 150
    assert body["metadata"] == {"mock": True, "style": "creative"}

    ideas = client.post("/api/generate/ideas", json={"theme": "dragons", "count": 2}).json()
    assert ideas == {"ideas": ["Creative dragons idea 1", "Creative dragons idea 2"]}

    response = client.post("/api/generate/stream", json={"prompt": "A dragon bakery"})
    assert response.text.endswith("data: [DONE]\n\n")
    print("✓ Mock backend serves every endpoint without keys")


def test_stream():
    print("=" * 60)
    print("TEST: /api/generate/stream")
    print("=" * 60)

    client = make_client(service=FakeAIService(content="once upon"))
    response = client.post("/api/generate/stream", json={"prompt": "Tell me a story"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")

    events = [line for line in response.text.split("\n\n") if line]
    print(f"  → {len(events)} events")
    assert len(events) == 3
    assert '"content": "once"' in events[0]
    assert '"content": "upon"' in events[1]
    assert events[-1] == "data: [DONE]"
    print("✓ SSE stream terminated by [DONE]")


def test_signup_validation():
    client = make_client()
    valid = client.post("/api/validate/signup", json={
        "email": "maker@example.com",
        "password": "Spark1!xy",
        "confirm_password": "Spark1!xy",
        "username": "maker_01",
        "display_name": "Maker",
    }).json()
    assert valid["valid"] is True
    assert all(error is None for error in valid["errors"].values())

    invalid = client.post("/api/validate/signup", json={
        "email": "not-an-email",
        "password": "weak",
        "confirm_password": "other",
    }).json()
    assert invalid["valid"] is False
    assert invalid["errors"]["email"] == "Please enter a valid email address"
    assert invalid["errors"]["confirmPassword"] == "Passwords do not match"
    assert invalid["errors"]["username"] == "Username is required"
    print("✓ Signup validation")


# =============================================================================
# Challenges
# =============================================================================


def test_challenges():
    print("=" * 60)
    print("TEST: challenge endpoints")
    print("=" * 60)

    client = make_client(supabase=FakeSupabase(rows={"creative_prompts": [prompt_row()]}))
    today = client.get("/api/challenges/today")
    assert today.status_code == 200
    assert today.json()["id"] == "p1"

    assert client.get("/api/challenges/p1").json()["title"] == "Space Cat Story"
    assert len(client.get("/api/challenges").json()["challenges"]) == 1
    assert client.get("/api/challenges/trending?limit=0").status_code == 422

    empty = make_client()
    assert empty.get("/api/challenges/today").status_code == 404
    assert empty.get("/api/challenges/unknown").status_code == 404

    offline = make_client(supabase=FakeSupabase(error=db_down()))
    videos = offline.get("/api/challenges?type=video").json()["challenges"]
    assert [c["id"] for c in videos] == ["mock_3"]
    print("✓ Challenge reads, 404s and offline samples")


def test_challenge_drafts():
    client = make_client()
    response = client.post("/api/challenges/drafts", json={"type": "audio", "count": 2})
    assert response.status_code == 200
    drafts = response.json()["drafts"]
    assert len(drafts) == 2
    assert all(d["type"] == "audio" and d["is_active"] is False for d in drafts)
    assert drafts[0]["ai_style"] == "poem"
    print("✓ Drafts generated, nothing saved")


# =============================================================================
# Submissions
# =============================================================================


def test_submissions():
    print("=" * 60)
    print("TEST: submission endpoints")
    print("=" * 60)

    supabase = FakeSupabase(rows={"creative_submissions": [submission_row()]}, user=make_user("user-1"))
    client = make_client(supabase=supabase)

    listed = client.get("/api/submissions?challenge_id=p1&limit=10&offset=10").json()
    assert listed["submissions"][0]["user_display_name"] == "Taylor"
    assert supabase.queries[-1].has("range", 10, 19)

    created = client.post("/api/submissions", headers=AUTH, json={
        "prompt_id": "p1",
        "user_id": "someone-else",
        "text_content": "Luna floated past the moon",
        "tags": ["#cats"],
    })
    assert created.status_code == 201
    assert created.json()["type"] == "text"
    # Owner comes from the token, never the body
    assert created.json()["user_id"] == "user-1"
    assert ("get_user", ("access-token",)) in supabase.auth.calls
    insert = supabase.queries[-1]
    assert insert.has("insert")
    print("✓ List and create")


def test_submission_auth():
    body = {"prompt_id": "p1", "text_content": "A perfectly fine story"}

    client = make_client(supabase=FakeSupabase(user=make_user()))
    assert client.post("/api/submissions", json=body).status_code == 401
    assert client.post("/api/submissions", json=body, headers={"Authorization": "Basic abc"}).status_code == 401

    # Token that resolves to no user
    anonymous = make_client(supabase=FakeSupabase())
    response = anonymous.post("/api/submissions", json=body, headers=AUTH)
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"
    print("✓ Writes need a valid bearer token")


def test_submission_rejections():
    client = make_client(supabase=FakeSupabase(user=make_user()))
    base = {"prompt_id": "p1"}

    assert client.post("/api/submissions", json=base, headers=AUTH).status_code == 400

    short = client.post("/api/submissions", json={**base, "text_content": "tiny"}, headers=AUTH)
    assert short.json()["detail"] == "Content must be at least 10 characters long"

    tagged = client.post(
        "/api/submissions",
        json={**base, "content_url": "https://x.test/a.png", "tags": ["cats"]},
        headers=AUTH,
    )
    assert tagged.status_code == 400
    assert tagged.json()["detail"].startswith("cats: ")

    failing = make_client(supabase=FakeSupabase(error=db_down(), user=make_user()))
    response = failing.post("/api/submissions", json={**base, "text_content": "A perfectly fine story"}, headers=AUTH)
    assert response.status_code == 500
    print("✓ Submission validation and storage failures")


def test_supabase_unavailable():
    class BrokenManager:
        is_initialized = False

        def initialize(self, url, key):
            raise RuntimeError("Supabase initialization failed: Invalid URL")

    originals = (api_module.SupabaseClientManager, api_module.SUPABASE_URL, api_module.SUPABASE_ANON_KEY)
    api_module.SupabaseClientManager = BrokenManager
    api_module.SUPABASE_URL, api_module.SUPABASE_ANON_KEY = "not a url", "anon-key"
    try:
        client = make_client()
        app.state.challenge_repository = None
        response = client.get("/api/challenges/today")
    finally:
        api_module.SupabaseClientManager, api_module.SUPABASE_URL, api_module.SUPABASE_ANON_KEY = originals
    print(f"  → {response.status_code} {response.json()}")
    assert response.status_code == 503
    assert "Invalid URL" in response.json()["detail"]
    print("✓ Failed client setup is a 503")


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print(" API SERVER TESTS")
    print("=" * 60 + "\n")

    tests = [
        test_health_and_skills,
        test_generate,
        test_generate_rejections,
        test_helpers,
        test_mock_backend,
        test_stream,
        test_signup_validation,
        test_challenges,
        test_challenge_drafts,
        test_submissions,
        test_submission_auth,
        test_submission_rejections,
        test_supabase_unavailable,
    ]
    failed = 0
    for test in tests:
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
        print(f"\n❌ {failed} TEST(S) FAILED\n")
        sys.exit(1)
