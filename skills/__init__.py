"""
Skills - Composable AI capabilities for SparkStudio.

Each skill is a directory containing:
- SKILL.md: Metadata with YAML frontmatter + detailed instructions
- skill_name.py: Implementation
"""

import logging
from pathlib import Path

# Skill directories
SKILLS_DIR = Path(__file__).parent

from .generate_content.generate_content import ContentGenerator
from .generate_content.gemini_content import GeminiContentGenerator
from .generate_content.mock_content import MockContentGenerator
from .generate_challenge.generate_challenge import ChallengeGenerator

logger = logging.getLogger(__name__)

__all__ = [
    "ContentGenerator",
    "GeminiContentGenerator",
    "MockContentGenerator",
    "ChallengeGenerator",
    "SKILLS_DIR",
    "list_skills",
    "get_skill_context",
]


def list_skills() -> list[dict]:
    """
    List all available skills with their metadata.

    Returns list of dicts with name, description, triggers, keywords and path.
    """
    import yaml

    skills = []
    for skill_dir in sorted(SKILLS_DIR.iterdir()):
        if skill_dir.is_dir() and not skill_dir.name.startswith("_"):
            skill_md = skill_dir / "SKILL.md"
            if skill_md.exists():
                content = skill_md.read_text(encoding="utf-8")
                # Extract YAML frontmatter
                if content.startswith("---"):
                    end = content.find("---", 3)
                    if end > 0:
                        frontmatter = content[3:end].strip()
                        try:
                            metadata = yaml.safe_load(frontmatter)
                        except yaml.YAMLError as e:
                            logger.warning(f"Bad SKILL.md frontmatter in {skill_dir.name}: {e}")
                            continue
                        skills.append({
                            "name": metadata.get("name", skill_dir.name),
                            "description": metadata.get("description", ""),
                            "triggers": metadata.get("triggers", []),
                            "keywords": metadata.get("keywords", []),
                            "path": str(skill_dir),
                        })
    return skills


def get_skill_context() -> str:
    """
    Get skill summaries as a markdown list.

    Returns formatted string with name + description for each skill.
    """
    skills = list_skills()
    lines = ["## Available Skills\n"]
    for skill in skills:
        lines.append(f"- **{skill['name']}**: {skill['description']}")
    return "\n".join(lines)
