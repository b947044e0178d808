"""Reply parsing and fallback replies.

Model replies mark predictions with <green>...</green> and <red>...</red>.
The parser turns a reply into tone-tagged segments a client can render
without handling markup itself.
"""

import random
import re
from dataclasses import asdict, dataclass
from typing import Literal

Tone = Literal["positive", "negative", "neutral"]

_MARKER_RE = re.compile(r"<(green|red)>(.*?)</\1>", re.DOTALL | re.IGNORECASE)
_STRAY_TAG_RE = re.compile(r"</?(green|red)>", re.IGNORECASE)
_TONES: dict[str, Tone] = {"green": "positive", "red": "negative"}

FALLBACK_RESPONSES = [
    "Cosmic energies abhi thoda clouded hain, but main sense kar raha hun ki aap kuch important guidance chahte hain. Please apne birth details complete kariye accurate Vedic guidance ke liye.",
    "Celestial channels mein thoda interference aa raha hai. Stars aapki help karna chahte hain though! Please ensure kariye ki aapke birth details complete hain.",
    "Universe mujhse keh raha hai ki main aapki energy ke saath reconnect karun. Kya situation hai jo aapke dil mein hai aur Vedic guidance chahiye?",
    "Mercury thoda cosmic static cause kar raha hai! But main aapki energy clearly sense kar sakta hun. Kaunsi life situation mein Jyotish ki wisdom chahiye?",
    "Planetary alignment shift ho raha hai, but aapka question important hai. Batayiye ki aap kya experience kar rahe hain taki main right Vedic guidance de sakun?",
]


@dataclass(frozen=True)
class ReplySegment:
    tone: Tone
    text: str

    def to_dict(self) -> dict:
        return asdict(self)


def _neutral(text: str) -> list[ReplySegment]:
    # Unbalanced markers are dropped rather than shown to the user.
    cleaned = _STRAY_TAG_RE.sub("", text)
    return [ReplySegment(tone="neutral", text=cleaned)] if cleaned.strip() else []


def parse_reply(text: str) -> list[ReplySegment]:
    """Split a reply into positive, negative and neutral segments.

    Segment order follows the reply. Whitespace inside segments is kept so
    paragraphs survive; segments that are only whitespace are dropped.

    Examples:
        >>> [s.tone for s in parse_reply("Hi <green>good</green> ok")]
        ['neutral', 'positive', 'neutral']
    """
    segments: list[ReplySegment] = []
    position = 0
    for match in _MARKER_RE.finditer(text or ""):
        segments.extend(_neutral(text[position:match.start()]))
        inner = match.group(2)
        if inner.strip():
            segments.append(ReplySegment(tone=_TONES[match.group(1).lower()], text=inner))
        position = match.end()
    segments.extend(_neutral((text or "")[position:]))
    return segments


def pick_fallback_response() -> str:
    """Reply served when the language model is unavailable."""
    return random.choice(FALLBACK_RESPONSES)
