# mindmap_engine/services/ai_response_parser.py
import logging
import re
from json import JSONDecodeError, JSONDecoder
from typing import Any

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
# Any backslash not starting a legal JSON escape, e.g. "\_" or "\alpha" in model text.
_BAD_ESCAPE_RE = re.compile(r'\\(?!["\\/bfnrt]|u[0-9a-fA-F]{4})')
_THOUGHT_KEYS = frozenset({
    "thought",
    "thoughts",
    "thought_signature",
    "thought-signature",
    "thoughtSignature",
})
_LINE_SEPARATORS = {"\u2028": "\\u2028", "\u2029": "\\u2029"}

_strict = JSONDecoder()
_lax = JSONDecoder(strict=False)


def _unwrap(text: str) -> str:
    text = text.strip().lstrip("\ufeff")
    fenced = _FENCE_RE.search(text)
    if fenced:
        text = fenced.group(1).strip()
    for needle, replacement in _LINE_SEPARATORS.items():
        text = text.replace(needle, replacement)
    return text


def _candidates(text: str) -> list[str]:
    found: list[str] = []
    outer = _OBJECT_RE.search(text)
    for candidate in (text, outer.group(0) if outer else ""):
        for variant in (candidate, _BAD_ESCAPE_RE.sub(r"\\\\", candidate)):
            if variant and variant not in found:
                found.append(variant)
    return found


def _drop_thoughts(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _drop_thoughts(item) for key, item in value.items() if key not in _THOUGHT_KEYS}
    if isinstance(value, list):
        return [_drop_thoughts(item) for item in value]
    return value


def parse_ai_response_text(raw_text: str) -> dict[str, Any]:
    """
    Parse the JSON object a model returned, tolerating the usual damage:
    code fences, a leading BOM, chatter around the object, stray backslashes.

    Raises JSONDecodeError when no JSON object can be recovered.
    """
    text = _unwrap(raw_text or "")
    if not text:
        raise JSONDecodeError("AI response payload is empty", raw_text or "", 0)

    last_error: JSONDecodeError | None = None
    for candidate in _candidates(text):
        for decoder in (_strict, _lax):
            try:
                parsed = decoder.decode(candidate)
            except JSONDecodeError as exc:
                last_error = exc
                continue
            if not isinstance(parsed, dict):
                raise JSONDecodeError("AI response is not a JSON object", candidate, 0)
            return _drop_thoughts(parsed)

    logger.error("Failed to parse AI response after cleanup: %s", last_error)
    raise last_error if last_error else JSONDecodeError("Unable to parse AI response", raw_text, 0)
