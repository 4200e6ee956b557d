"""
SSML document construction.

Wraps plain text in the voice and prosody elements the speech service
expects:

    <speak version='1.0' xml:lang='en-US' xmlns='http://www.w3.org/2001/10/synthesis'>
        <voice name='en-US-AriaNeural'>
            <prosody rate='+10%'>
                Hello &amp; welcome
            </prosody>
        </voice>
    </speak>
"""
from __future__ import annotations

SSML_NAMESPACE = "http://www.w3.org/2001/10/synthesis"

_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(text: str) -> str:
    """Escape the five XML special characters (& first)."""
    for raw, entity in _ESCAPES:
        text = text.replace(raw, entity)
    return text


def format_prosody_rate(rate: int) -> str:
    """
    Format a prosody rate offset as a signed percentage.

    Examples:
        >>> format_prosody_rate(10)
        '+10%'
        >>> format_prosody_rate(-5)
        '-5%'
        >>> format_prosody_rate(0)
        '+0%'
    """
    return f"+{rate}%" if rate >= 0 else f"{rate}%"


def build_ssml(text: str, voice_name: str, prosody_rate: int = 0, language: str = "en-US") -> str:
    """
    Build the SSML document for one synthesis call.

    Args:
        text: Plain text to speak; XML special characters are escaped.
        voice_name: Vendor voice, e.g. "en-US-AriaNeural".
        prosody_rate: Signed percentage offset from the voice's default speed.
        language: xml:lang of the document.

    Returns:
        SSML string.
    """
    return (
        f"<speak version='1.0' xml:lang='{escape_xml(language)}' xmlns='{SSML_NAMESPACE}'>"
        f"<voice name='{escape_xml(voice_name)}'>"
        f"<prosody rate='{format_prosody_rate(prosody_rate)}'>"
        f"{escape_xml(text)}"
        "</prosody>"
        "</voice>"
        "</speak>"
    )
