"""Prompts for summarization and the Bionic Reading transform."""

from focusflow_processing.schemas.preferences import UserPreferences

SUMMARY_SYSTEM_PROMPT = """You condense documents for readers who benefit from short, well-structured text, including readers with ADHD.

Rules:
- Keep every key fact, name and number the reader needs
- Drop repetition, boilerplate and navigation text
- Use plain language and short sentences
- Never invent information that is not in the source"""

SUMMARY_RESPONSE_FORMAT = """Return JSON only, in exactly this shape:
{"summary": "<the summary as plain text, paragraphs separated by blank lines>"}"""

BIONIC_SYSTEM_PROMPT = """You convert text into ADHD-friendly Bionic Reading JSON. You return STRICT JSON ONLY."""

BIONIC_JSON_FORMAT = """{
  "paragraphs": [
    { "sentences": [{ "text": "<b>Thi</b>s is an <b>exa</b>mple." }] }
  ]
}"""

_DETAIL_GUIDANCE = {
    "brief": "Keep the summary very short: a handful of sentences covering only the essentials.",
    "standard": "Keep the summary to a few short paragraphs.",
    "detailed": "Keep the summary thorough, covering each main section in its own paragraph.",
}

_ADHD_GUIDANCE = {
    "low": "Sentences may be of normal length.",
    "moderate": "Prefer short sentences and short paragraphs.",
    "high": "Use very short sentences (under 15 words) and at most three sentences per paragraph.",
}


def _preference_lines(preferences: UserPreferences | None, output_style: str | None) -> list[str]:
    lines: list[str] = []
    if preferences is not None:
        if preferences.detail_level:
            lines.append(
                _DETAIL_GUIDANCE.get(
                    preferences.detail_level.lower(),
                    f"Detail level requested by the reader: {preferences.detail_level}.",
                )
            )
        if preferences.adhd_level:
            lines.append(
                _ADHD_GUIDANCE.get(
                    preferences.adhd_level.lower(),
                    f"Reader ADHD level: {preferences.adhd_level}; favour short sentences.",
                )
            )
        if preferences.preferred_output:
            lines.append(f"The reader prefers output as: {preferences.preferred_output}.")
    if output_style:
        lines.append(f"Requested output style: {output_style}.")
    return lines


def build_summary_prompt(
    text: str,
    preferences: UserPreferences | None = None,
    output_style: str | None = None,
    partial: bool = False,
) -> str:
    """Build the user prompt for one summarization call.

    Args:
        text: Source text (or one chunk of it)
        preferences: Reader preferences, None for defaults
        output_style: Caller-requested style hint
        partial: True when the text is one chunk of a longer document
    """
    parts: list[str] = []
    if partial:
        parts.append(
            "This is one consecutive part of a longer document. Summarize only this part; "
            "the part summaries will be combined afterwards."
        )
    else:
        parts.append("Summarize the following text.")

    guidance = _preference_lines(preferences, output_style)
    if guidance:
        parts.append("Reader preferences:\n" + "\n".join(f"- {line}" for line in guidance))

    parts.append(SUMMARY_RESPONSE_FORMAT)
    parts.append(f"TEXT:\n{text}")
    return "\n\n".join(parts)


def build_bionic_prompt(
    summary: str,
    emphasis_ratio: float = 0.4,
    preferences: UserPreferences | None = None,
) -> str:
    """Build the user prompt for the Bionic Reading transform."""
    percent = round(emphasis_ratio * 100)
    rules = [
        f"Bold the first {percent}% of the characters of each word using <b></b> "
        "(at least one character per word)",
        "Keep sentences short",
        "Use strong structure: one idea per paragraph",
        "Keep the wording of the text; do not add or drop content",
        "Return STRICT JSON ONLY, matching the format below exactly",
    ]
    if preferences is not None and preferences.adhd_level:
        rules.append(
            _ADHD_GUIDANCE.get(
                preferences.adhd_level.lower(),
                "Favour short sentences.",
            )
        )

    rule_block = "\n".join(f"- {rule}" for rule in rules)
    return f"""Convert text into ADHD-friendly Bionic Reading JSON.

Rules:
{rule_block}

JSON FORMAT:
{BIONIC_JSON_FORMAT}

TEXT:
{summary}"""
