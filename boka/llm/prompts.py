"""Prompt templates for the three LLM rounds.

Responsibilities:
- Centralize system prompts for base translation, span planning, and span
  variant generation.
- Build the user messages each round sends alongside its system prompt.
- Resolve language codes into display names used inside prompts.
"""

from __future__ import annotations

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "en-gb": "British English",
    "fr": "French",
    "es": "Spanish",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ja": "Japanese",
    "jp": "Japanese",
    "ko": "Korean",
    "zh": "Mandarin Chinese",
    "cn": "Mandarin Chinese",
    "nl": "Dutch",
    "sv": "Swedish",
    "ru": "Russian",
    "ar": "Arabic",
    "hi": "Hindi",
    "tr": "Turkish",
    "pl": "Polish",
    "th": "Thai",
    "vi": "Vietnamese",
    "id": "Indonesian",
    "ms": "Malay",
    "uk": "Ukrainian",
    "cs": "Czech",
    "ro": "Romanian",
    "el": "Greek",
    "he": "Hebrew",
    "iw": "Hebrew",
    "da": "Danish",
    "fi": "Finnish",
    "no": "Norwegian",
    "nb": "Norwegian",
    "hu": "Hungarian",
    "mn": "Mongolian",
    "ka": "Georgian",
    "sw": "Swahili",
    "tl": "Tagalog",
}

CONNECTION_TEST_SYSTEM_PROMPT = "You are a connectivity test. Reply with OK."
CONNECTION_TEST_USER_PROMPT = "ping"


def language_name(code: str) -> str:
    """Return the display name for a language code.

    Unknown codes are returned unchanged so free-text language names work too.
    """

    return LANGUAGE_NAMES.get(code.strip().lower(), code)


def base_translation_system_prompt(
    target_language: str,
    source_language: str | None = None,
    adult_mode: bool = False,
) -> str:
    """Return the round-1 system prompt for natural, meaning-preserving translation."""

    lang_name = language_name(target_language)
    if adult_mode:
        register_note = "Keep tone authentic; slang/profanity is allowed if it's in the source."
    else:
        register_note = "Keep it family-friendly. Colloquial is fine, vulgar is not."

    source_note = ""
    if source_language:
        source_note = f"The source text is written in {language_name(source_language)}. "

    return (
        f"You are a {lang_name} translation expert. {source_note}"
        f"Translate the requested segment into {lang_name}.\n"
        "\n"
        "Guidelines:\n"
        "- Translate naturally, not literally.\n"
        "- Preserve meaning, tone, and speaker intent.\n"
        "- Keep punctuation and sentence boundaries natural.\n"
        "- Return ONLY the translated text for the segment. "
        "No quotes, no markdown, no commentary.\n"
        "\n"
        "Tone note:\n"
        f"{register_note}"
    )


def span_planning_system_prompt(
    target_language: str,
    source_language: str | None = None,
    dense_spans: bool = False,
) -> str:
    """Return the round-2 system prompt asking for one block of static and swappable parts."""

    _ = source_language
    lang_name = language_name(target_language)
    if dense_spans:
        density_instruction = "Aim for 3-5 swappable spans."
    else:
        density_instruction = "Aim for 1-2 swappable spans."

    return (
        f"You are a {lang_name} language expert creating interactive learning materials.\n"
        "\n"
        f"You will receive a single translated segment in {lang_name}. Your job is to turn "
        "it into an interactive block with static text + swappable spans.\n"
        "\n"
        "Output format:\n"
        "Return a JSON array with EXACTLY one block in this schema:\n"
        "\n"
        "[\n"
        "  {\n"
        '    "id": "b1",\n'
        '    "segments": [\n'
        '      { "type": "static", "text": "..." },\n'
        '      { "type": "swappable", "id": "s1", "variants": [\n'
        '        { "text": "...", "register": "neutral", "note": "", "difficulty": 2 }\n'
        "      ]}\n"
        "    ]\n"
        "  }\n"
        "]\n"
        "\n"
        "Rules:\n"
        "- The block must preserve the meaning of the segment.\n"
        "- Each swappable span MUST include a neutral variant that matches the exact text "
        "from the segment.\n"
        '- Variants arrays should contain ONLY the neutral variant for now (register: "neutral").\n'
        f"- {density_instruction}\n"
        "\n"
        "Return ONLY the JSON array. No markdown."
    )


def span_variants_system_prompt(
    target_language: str,
    source_language: str | None = None,
    adult_mode: bool = False,
) -> str:
    """Return the round-3 system prompt for register-graded variants of one anchor phrase."""

    _ = source_language
    lang_name = language_name(target_language)
    register_choices = "neutral|formal|literary|casual|colloquial"
    if adult_mode:
        register_choices += "|vulgar"
        register_instruction = (
            "Generate variants across the FULL register spectrum:\n"
            "- formal\n- literary\n- neutral\n- casual\n- colloquial\n- vulgar"
        )
    else:
        register_instruction = (
            "Generate variants across these registers:\n"
            "- formal\n- literary\n- neutral\n- casual\n- colloquial\n"
            "\n"
            "Keep all variants family-friendly."
        )

    return (
        f"You are a {lang_name} language expert. You will be given a segment context and an "
        "anchor phrase within it.\n"
        "\n"
        "Return a JSON array of variants. Each item:\n"
        f'{{ "text": "...", "register": "{register_choices}", '
        '"note": "English learner note", "difficulty": 1-5 }\n'
        "\n"
        "Rules:\n"
        "- The FIRST variant MUST be the most natural neutral phrasing.\n"
        "- Keep meaning consistent with the segment context.\n"
        "- Aim for 2-4 variants total.\n"
        "\n"
        "Register guidance:\n"
        f"{register_instruction}\n"
        "\n"
        "Return ONLY the JSON array. No markdown."
    )


def base_translation_user_prompt(full_story: str, segment: str) -> str:
    """Return the round-1 user message carrying the story context and the target segment."""

    return f"FULL STORY (context):\n{full_story}\n\nSEGMENT TO TRANSLATE:\n{segment}"


def span_variants_user_prompt(segment_context: str, anchor_phrase: str) -> str:
    """Return the round-3 user message carrying the base translation and one anchor."""

    return f"SEGMENT CONTEXT:\n{segment_context}\n\nANCHOR PHRASE:\n{anchor_phrase}"
