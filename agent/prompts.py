"""
Prompt templates for SparkStudio content generation.

These prompts are designed to:
1. Frame every request as SparkStudio's creative assistant
2. Steer output toward the user's chosen creative style
3. Shape helper requests (enhance, ideas, image prompts) so their
   answers are easy to post-process

Philosophy:
- Build on the user's idea, never replace it
- Original, inspiring, appropriate for all ages
"""

from models.creative import CreativeStyle


class Prompts:
    """Collection of prompt templates for the creative assistant."""

    # =========================================================================
    # SYSTEM FRAMING
    # =========================================================================

    SYSTEM = """
You are SparkStudio AI, a creative assistant that helps users generate amazing content.

Style: {style_name}
{style_instruction}

Please generate creative, engaging content that matches the requested style and builds upon the user's idea. Be original, inspiring, and appropriate for all ages.
"""

    STYLE_INSTRUCTIONS = {
        CreativeStyle.HAIKU: "Create a beautiful haiku following the 5-7-5 syllable structure. Focus on nature, emotions, or everyday moments.",
        CreativeStyle.POEM: "Write an expressive poem with vivid imagery and emotional depth. Use creative metaphors and rhythm.",
        CreativeStyle.STORY: "Craft an engaging short story with characters, conflict, and resolution. Make it compelling and memorable.",
        CreativeStyle.FANTASY: "Create a magical fantasy piece with mystical elements, heroic characters, and enchanting worlds.",
        CreativeStyle.SCIFI: "Write a science fiction piece with futuristic technology, space exploration, or speculative concepts.",
        CreativeStyle.CAPTION: "Generate catchy, engaging social media captions that are shareable and trendy.",
    }

    DEFAULT_STYLE_INSTRUCTION = (
        "Be creative, original, and engaging. Surprise and delight the user with your creativity."
    )

    # =========================================================================
    # HELPER REQUESTS
    # =========================================================================

    ENHANCE_TEXT = "Enhance and improve this text while maintaining its core meaning: {text}"

    GENERATE_IDEAS = "Generate {count} creative ideas for: {theme}"

    IDEAS_RECENT_PROMPT = "Ideas for: {theme}"

    IMAGE_PROMPT_REQUEST = "Generate a detailed image generation prompt for: {idea}"

    IMAGE_PROMPT_WRAPPER = (
        "A stunning {style_name} artwork, {content}, highly detailed, vibrant colors, "
        "cinematic lighting, trending on artstation, 4k resolution, masterpiece"
    )

    CHALLENGE_IDEAS = (
        "Generate {count} creative challenge ideas for {type_name}. "
        "Each should be unique and inspiring."
    )

    # =========================================================================
    # FALLBACKS
    # =========================================================================

    FALLBACK_RESPONSE = (
        "✨ **SparkStudio AI Enhancement**\n\n"
        "While our AI is taking a creative break, here's some inspiration: "
        "{prompt} can become something amazing with your unique perspective! "
        "Try adding your personal touch and see what magic you can create. 🎨"
    )

    MOCK_RESPONSE = (
        "✨ **Enhanced Creative Response**\n\n"
        'Your prompt "{prompt}" has been transformed into something magical! '
        "This is a mock response for development purposes. "
        "In production, this would be generated by advanced AI models.\n\n"
        "🌟 *SparkStudio AI is here to amplify your creativity!*"
    )

    @classmethod
    def style_instruction(cls, style: str) -> str:
        return cls.STYLE_INSTRUCTIONS.get(
            CreativeStyle.from_name(style), cls.DEFAULT_STYLE_INSTRUCTION
        )

    @classmethod
    def system_prompt(cls, style: str) -> str:
        """System framing for a style name (unknown styles read as Creative)."""
        creative_style = CreativeStyle.from_name(style)
        return cls.SYSTEM.format(
            style_name=creative_style.display_name,
            style_instruction=cls.style_instruction(style),
        )

    @classmethod
    def image_prompt(cls, content: str, style: str) -> str:
        style_name = CreativeStyle.from_name(style).display_name.lower()
        return cls.IMAGE_PROMPT_WRAPPER.format(style_name=style_name, content=content)
