"""Parsers for extracting link markers and front matter from document text."""

import logging
from typing import Any, Dict, List

import yaml


logger = logging.getLogger(__name__)

MARKER_OPEN = "[["
MARKER_CLOSE = "]]"
FRONT_MATTER_FENCE = "---"


def extract_markers(text: str) -> List[str]:
    """
    Extract the payloads of [[...]] markers, left to right.
    
    Each marker ends at the first "]]" after its "[[", so markers never
    overlap and may span lines. An opening "[[" with no closing "]]" after it
    produces nothing.
    
    Args:
        text: Raw document text.
    
    Returns:
        Marker payloads in document order, without the brackets.
    """
    markers: List[str] = []
    if not text:
        return markers

    position = 0
    while True:
        start = text.find(MARKER_OPEN, position)
        if start == -1:
            break
        end = text.find(MARKER_CLOSE, start + len(MARKER_OPEN))
        if end == -1:
            # Dangling opener
            break
        markers.append(text[start + len(MARKER_OPEN):end])
        position = end + len(MARKER_CLOSE)

    return markers


def parse_front_matter(text: str) -> Dict[str, Any]:
    """
    Parse the YAML front matter block at the top of a document.
    
    Args:
        text: Raw document text.
    
    Returns:
        The front matter mapping, or an empty dict if there is none or it is
        not valid YAML.
    """
    if not text:
        return {}

    lines = text.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_FENCE:
        return {}

    for index, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONT_MATTER_FENCE:
            block = "\n".join(lines[1:index])
            break
    else:
        return {}

    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        logger.debug("Ignoring invalid front matter: %s", e)
        return {}

    return data if isinstance(data, dict) else {}


def extract_aliases(text: str) -> List[str]:
    """Return the aliases a document declares in its front matter."""
    front_matter = parse_front_matter(text)
    raw = front_matter.get("aliases", front_matter.get("alias"))

    if raw is None:
        return []
    if isinstance(raw, str):
        values = raw.split(",")
    elif isinstance(raw, list):
        values = [str(item) for item in raw if item is not None]
    else:
        values = [str(raw)]

    return [value.strip() for value in values if value.strip()]
