"""General parsing utilities for recipe extraction."""

import re
from typing import Dict, List, Optional

from recipe_export.app.services.extraction.models import Step

NUTRIENT_LABELS: Dict[str, str] = {
    "calories": "calories",
    "protein": "protein",
    "carbs": "carbohydrate",
    "carbohydrate": "carbohydrate",
    "carbohydrates": "carbohydrate",
    "fat": "fat",
}

TIME_LABELS: Dict[str, str] = {
    "prep": "prep_time",
    "prep time": "prep_time",
    "cook": "cook_time",
    "cook time": "cook_time",
    "total": "total_time",
    "total time": "total_time",
}

SERVING_LABELS = {"serves", "servings", "serving size"}

# A numbered step marker at the start of the text or right after a sentence end.
_STEP_MARKER = re.compile(
    r"(?:^|(?<=[.!?])\s+)(?:step\s*\d+\s*[:.)\-]?|\d{1,2}[.)])\s+",
    re.I,
)


def clean_text(text: str) -> str:
    """Normalize whitespace in text."""
    return re.sub(r"\s+", " ", text or "").strip()


def normalize_label(text: str) -> str:
    """Lower-case a page label and drop its trailing colon."""
    return clean_text(text).rstrip(":").strip().lower()


def coerce_text(value) -> str:
    """Reduce a JSON-LD scalar (or the first usable list entry) to a string."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        for item in value:
            text = coerce_text(item)
            if text:
                return text
    return ""


def extract_image(value) -> str:
    """Extract an image URL from the schema.org image formats.

    A list yields its first element; ``ImageObject`` dicts yield their url.
    """
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list) and value:
        return extract_image(value[0])
    if isinstance(value, dict):
        return coerce_text(value.get("url") or value.get("contentUrl"))
    return ""


def extract_string_list(value) -> List[str]:
    """Keep every non-empty entry of a JSON-LD string list in document order."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    items: List[str] = []
    for entry in value:
        text = coerce_text(entry)
        if text:
            items.append(text)
    return items


def to_duration(value: str) -> str:
    """Turn a displayed time such as ``15 mins`` or ``1 hr 5 min`` into ``PT..``.

    Text without any number is returned unchanged.
    """
    text = clean_text(value)
    if not text:
        return ""
    hours = re.search(r"(\d+)\s*h", text, re.I)
    minutes = re.search(r"(\d+)\s*m", text, re.I)
    if hours or minutes:
        duration = "PT"
        if hours:
            duration += f"{int(hours.group(1))}H"
        if minutes:
            duration += f"{int(minutes.group(1))}M"
        return duration
    number = re.search(r"\d+", text)
    if number:
        return f"PT{int(number.group())}M"
    return text


def split_narrative_text(text: str) -> List[str]:
    """Best-effort split of a narrative instruction string into pseudo-steps.

    Recognised boundaries are line breaks and numbered markers (``Step 2:``,
    ``3.``, ``4)``) at sentence starts. Text with no boundary comes back as a
    single item.
    """
    parts: List[str] = []
    for line in re.split(r"\s*\n\s*", text):
        line = line.strip()
        if line:
            parts.extend(_split_numbered(line))
    return parts or [text]


def _split_numbered(line: str) -> List[str]:
    markers = list(_STEP_MARKER.finditer(line))
    if len(markers) < 2:
        return [line]
    parts: List[str] = []
    prefix = line[: markers[0].start()].strip()
    if prefix:
        parts.append(prefix)
    for idx, marker in enumerate(markers):
        end = markers[idx + 1].start() if idx + 1 < len(markers) else len(line)
        segment = line[marker.end() : end].strip()
        if segment:
            parts.append(segment)
    return parts


def _declared_types(entry: dict) -> List[str]:
    raw = entry.get("@type") or []
    types = [raw] if isinstance(raw, str) else raw
    return [str(t).lower() for t in types if t]


def _is_section(entry) -> bool:
    if not isinstance(entry, dict):
        return False
    return "howtosection" in _declared_types(entry) or isinstance(
        entry.get("itemListElement"), list
    )


def _entry_text(entry) -> str:
    if isinstance(entry, str):
        return entry.strip()
    if isinstance(entry, dict):
        return coerce_text(entry.get("text") or entry.get("description") or entry.get("name"))
    return ""


def _section_items(elements) -> List[str]:
    if isinstance(elements, (str, dict)):
        elements = [elements]
    if not isinstance(elements, list):
        return []
    items: List[str] = []
    for element in elements:
        text = _entry_text(element)
        if text:
            items.append(text)
    return items


def normalize_instructions(instructions, split_narrative: bool = True) -> List[Step]:
    """Normalize schema.org ``recipeInstructions`` into a list of steps.

    A narrative string becomes one untitled step, a flat list becomes one
    untitled step holding every entry, and each ``HowToSection`` becomes its
    own titled step. Document order is kept throughout.
    """
    if not instructions:
        return []
    if isinstance(instructions, str):
        text = instructions.strip()
        if not text:
            return []
        items = split_narrative_text(text) if split_narrative else [text]
        return [Step(items=items)]
    if isinstance(instructions, dict):
        instructions = [instructions]
    if not isinstance(instructions, list):
        return []

    steps: List[Step] = []
    pending: List[str] = []
    for entry in instructions:
        if _is_section(entry):
            if pending:
                steps.append(Step(items=pending))
                pending = []
            steps.append(
                Step(
                    title=coerce_text(entry.get("name")),
                    items=_section_items(entry.get("itemListElement")),
                )
            )
            continue
        text = _entry_text(entry)
        if text:
            pending.append(text)
    if pending:
        steps.append(Step(items=pending))
    return steps


def nutrient_field(label: str) -> Optional[str]:
    return NUTRIENT_LABELS.get(normalize_label(label))
