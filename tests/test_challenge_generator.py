"""
Test: Challenge Generation Skill

Run: python tests/test_challenge_generator.py
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from core import validators
from models.ai import AIResponse
from models.creative import CreativeType
from skills.generate_challenge import ChallengeGenerator


class ScriptedGenerator:
    """Answers every request with the same idea list."""

    def __init__(self, content: str):
        self.content = content
        self.requests = []

    async def generate_content(self, request):
        self.requests.append(request)
        return AIResponse(content=self.content)


IDEAS = (
    "1. Photograph your breakfast as if it were a movie poster. Add dramatic lighting.\n"
    "2. Capture a shadow that tells a story without showing its owner\n"
)


def test_challenge_ideas():
    print("=" * 60)
    print("TEST: challenge ideas")
    print("=" * 60)

    backend = ScriptedGenerator(IDEAS)
    generator = ChallengeGenerator(backend)
    ideas = asyncio.run(generator.generate_challenge_ideas(CreativeType.PHOTO, count=3))

    for idea in ideas:
        print(f"  • {idea}")
    assert len(ideas) == 3
    assert ideas[0].startswith("Photograph your breakfast")
    assert ideas[2] == "Creative idea 3 for theme"

    request = backend.requests[0]
    assert "Photo Challenge" in request.prompt
    assert request.temperature == 0.9
    assert request.top_p == 0.95
    print("✓ Ideas parsed and padded")


def test_drafts():
    print("=" * 60)
    print("TEST: challenge drafts")
    print("=" * 60)

    generator = ChallengeGenerator(ScriptedGenerator(IDEAS))
    drafts = asyncio.run(
        generator.draft_challenges(CreativeType.PHOTO, count=2, duration_days=2, difficulty=4)
    )

    assert len(drafts) == 2
    first = drafts[0]
    print(f"  → {first}")
    assert first.title == "Photograph your breakfast as if it…"
    assert drafts[1].title == "Capture a shadow that tells a…"
    assert first.description.startswith("Photograph your breakfast")
    assert first.type is CreativeType.PHOTO
    assert first.ai_style == "fantasy"
    assert first.tags == ["photo", "fantasy", "ai-drafted"]
    assert first.difficulty == 4 and first.is_hard
    assert not first.is_active
    assert (first.expires_at - first.created_at).days == 2
    assert drafts[0].id != drafts[1].id
    print("✓ Drafts are inactive CreativePrompts")


def test_short_title_kept_whole():
    assert ChallengeGenerator._title_from_idea("Haiku about rain. Use five words.") == "Haiku about rain"
    assert ChallengeGenerator._title_from_idea("Theme: dreams in colour") == "Theme"
    print("✓ Short titles untouched")


def test_titles_stay_valid():
    title = ChallengeGenerator._title_from_idea
    assert title("Mr. Fox writes a letter to the moon") == "Mr. Fox writes a letter to…"
    assert title("A 2.5 minute vlog about your morning commute") == "A 2.5 minute vlog about your…"
    assert title("Sketch your street at 10:30 at night") == "Sketch your street at 10:30 at…"
    assert ChallengeGenerator._draft_title("Cat.", CreativeType.PHOTO) == "Photo Challenge"

    long_idea = "Mr. Fox writes a letter to the moon " + "and waits for a reply " * 30
    generator = ChallengeGenerator(ScriptedGenerator(long_idea))
    (draft,) = asyncio.run(generator.draft_challenges(CreativeType.TEXT, count=1))
    print(f"  → {draft.title!r}, description {len(draft.description)} chars")
    assert validators.challenge_title_validator(draft.title) is None
    assert validators.challenge_description_validator(draft.description) is None
    assert len(draft.description) == 500
    assert draft.description.endswith("…")
    print("✓ Draft titles and descriptions pass the challenge validators")


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print(" CHALLENGE GENERATOR TESTS")
    print("=" * 60 + "\n")

    failed = 0
    for test in [test_challenge_ideas, test_drafts, test_short_title_kept_whole, test_titles_stay_valid]:
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
