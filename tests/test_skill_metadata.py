"""
Test: Skill Metadata Parsing

Verifies that all SKILL.md files:
1. Exist in their skill directories
2. Have valid YAML frontmatter
3. Contain required fields (name, description, triggers, keywords)

Run: python tests/test_skill_metadata.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import yaml

EXPECTED_SKILLS = ["generate_content", "generate_challenge"]
REQUIRED_FIELDS = ["name", "description", "triggers", "keywords"]


def read_frontmatter(skill_md: Path) -> dict:
    content = skill_md.read_text(encoding="utf-8")
    assert content.startswith("---"), "missing YAML frontmatter (should start with ---)"
    end = content.find("---", 3)
    assert end > 0, "invalid frontmatter (missing closing ---)"
    return yaml.safe_load(content[3:end].strip())


def test_skill_metadata():
    skills_dir = Path(__file__).parent.parent / "skills"

    print("=" * 60)
    print("TEST: Skill Metadata Parsing")
    print("=" * 60)
    print(f"\nSkills directory: {skills_dir}")
    print()

    for skill_name in EXPECTED_SKILLS:
        skill_md = skills_dir / skill_name / "SKILL.md"
        print(f"Testing: {skill_name}")
        print("-" * 40)

        assert skill_md.exists(), f"{skill_md} not found"
        metadata = read_frontmatter(skill_md)
        print(f"  ✓ YAML parses correctly")

        missing = [f for f in REQUIRED_FIELDS if f not in metadata]
        assert not missing, f"{skill_name}: missing required fields {missing}"
        assert metadata["name"] == skill_name
        assert isinstance(metadata["triggers"], list)
        assert isinstance(metadata["keywords"], list)
        print(f"  ✓ All required fields present")

        print(f"  → description: {metadata['description'][:50]}...")
        print(f"  → triggers: {len(metadata['triggers'])} items")
        print(f"  → keywords: {metadata['keywords']}")
        print()


def test_skill_module_imports():
    print()
    print("=" * 60)
    print("TEST: Skill Module Imports")
    print("=" * 60)
    print()

    from skills import SKILLS_DIR, get_skill_context, list_skills

    print(f"✓ SKILLS_DIR: {SKILLS_DIR}")

    skills = list_skills()
    print(f"  → Found {len(skills)} skills")
    for s in skills:
        print(f"    • {s['name']}")
    assert [s["name"] for s in skills] == sorted(EXPECTED_SKILLS)

    context = get_skill_context()
    print(f"  → Preview:\n{context[:200]}...")
    assert context.startswith("## Available Skills")
    assert "**generate_challenge**" in context
    print("✓ Context generated successfully")


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print(" SKILL METADATA TESTS")
    print("=" * 60 + "\n")

    failed = 0
    for test in [test_skill_metadata, test_skill_module_imports]:
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
