# SPDX-License-Identifier: AGPL-3.0-only

"""
Recover JSON from language model output.

Models do not reliably return syntactically valid JSON: answers arrive wrapped
in code fences, surrounded by prose, with trailing commas or single quotes, or
with the requested envelope cut off. The repair ladder below is an ordered
tuple of pure stages. Each stage maps the raw answer to a candidate string and
the first candidate that parses wins.
"""

import json
import logging
import re
from typing import Any, Callable, Optional, Tuple

from common.errors import UnrecoverableFormat

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_OBJECT_ARRAY = re.compile(r"\[\s*\{[\s\S]+\}\s*\]")


def strip_code_fences(text: str, language: str = "json") -> str:
    """Remove a leading ```<language> marker and a trailing ``` marker."""
    opener = _FENCE_OPEN if language == "json" else re.compile(
        r"^```(?:%s)?\s*" % language, re.IGNORECASE
    )
    cleaned = opener.sub("", text.strip())
    return _FENCE_CLOSE.sub("", cleaned).strip()


def slice_outer_object(text: str) -> Optional[str]:
    """Keep the span from the first '{' to the last '}'."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def repair_common_defects(text: str) -> str:
    """Drop trailing commas, normalize quotes and collapse newlines."""
    fixed = _TRAILING_COMMA.sub(r"\1", text)
    fixed = fixed.replace("'", '"')
    return fixed.replace("\r", " ").replace("\n", " ")


def find_object_array(text: str) -> Optional[str]:
    """Find an embedded array of objects anywhere in the text."""
    match = _OBJECT_ARRAY.search(text)
    return match.group(0) if match else None


def _stage_fences(raw: str) -> Optional[str]:
    return strip_code_fences(raw)


def _stage_slice(raw: str) -> Optional[str]:
    return slice_outer_object(strip_code_fences(raw))


def _stage_repair(raw: str) -> Optional[str]:
    sliced = slice_outer_object(strip_code_fences(raw))
    return repair_common_defects(sliced) if sliced is not None else None


def _stage_object_array(raw: str) -> Optional[str]:
    return find_object_array(strip_code_fences(raw))


REPAIR_LADDER: Tuple[Tuple[str, Callable[[str], Optional[str]]], ...] = (
    ("strip_fences", _stage_fences),
    ("slice_object", _stage_slice),
    ("repair_text", _stage_repair),
    ("object_array", _stage_object_array),
)


def parse_json(raw: Any) -> Any:
    """
    Parse model output with the repair ladder.

    Args:
        raw: Raw model answer

    Returns:
        The parsed JSON value (object, array or scalar)

    Raises:
        UnrecoverableFormat: If no stage yields valid JSON
    """
    if not isinstance(raw, str) or not raw.strip():
        raise UnrecoverableFormat(preview="")

    for name, stage in REPAIR_LADDER:
        candidate = stage(raw)
        if not candidate:
            continue
        try:
            value = json.loads(candidate)
        except ValueError:
            continue
        if name != "strip_fences":
            logger.debug("Recovered JSON with repair stage '%s'", name)
        return value

    preview = raw[:300]
    logger.warning("All JSON repair stages failed. Preview: %s", preview)
    raise UnrecoverableFormat(preview=preview)


def sanitize_json(raw: Any) -> str:
    """
    Return canonical JSON text recovered from model output.

    Canonical output parses at the first stage, so sanitizing it again returns
    the same string.

    Raises:
        UnrecoverableFormat: If no stage yields valid JSON
    """
    return json.dumps(parse_json(raw), ensure_ascii=False)
