"""Slugs, filenames and the standalone document wrapper for generated pages."""

import html
import logging
import re
import time
from typing import Optional

from recipe_export.app.services.storage.base import RecipePageStore, StaticPageWriter

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif;
            line-height: 1.6;
            max-width: 800px;
            margin: 0 auto;
            padding: 20px;
        }}
        img {{ max-width: 100%; height: auto; }}
        h1 {{ margin-top: 0; }}
    </style>
</head>
<body>
    {body}
</body>
</html>"""

NOT_FOUND_HTML = (
    "<div style=\"max-width: 600px; margin: 40px auto; padding: 20px; text-align: center;\">"
    "<h1>Recipe Not Found or Expired</h1>"
    "<p>This recipe is no longer available. Please generate it again if needed.</p>"
    "</div>"
)


def slugify(value: Optional[str]) -> str:
    if not value:
        return ""
    return _SLUG_RE.sub("-", value.lower()).strip("-")


def generate_slug(name: str, now_ms: Optional[int] = None) -> str:
    """Unique-ish page key: the slugified name plus a millisecond timestamp."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    base = slugify(name) or "recipe"
    return f"{base}-{now_ms}"


def static_filename(name: str) -> str:
    return f"{slugify(name) or 'recipe'}.html"


def build_recipe_document(name: str, fragment: str) -> str:
    return DOCUMENT_TEMPLATE.format(title=html.escape(name or ""), body=fragment)


def publish_store(store: RecipePageStore, writer: StaticPageWriter) -> int:
    """Write every stored page as ``<slug>.html`` and remove it from the store.

    Pages inserted while publishing stay in the store for the next build.
    """
    pages = store.items()
    for slug, page in pages.items():
        writer.write_file(f"{slug}.html", page.html)
        store.delete(slug)
    logger.info("Published %d stored recipe pages", len(pages))
    return len(pages)
