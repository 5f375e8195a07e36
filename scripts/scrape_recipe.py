#!/usr/bin/env python
"""
Scrape one recipe page and write it as a standalone HTML document.

Run manually:
    python scripts/scrape_recipe.py \
        https://www.mindfulchef.com/healthy-recipes/sweet-sour-salmon-traybake \
        docs/salmon.html
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from recipe_export.app.core.errors import RecipeExportError
from recipe_export.app.services.page_builder import build_recipe_document
from recipe_export.app.services.recipe_normalizer import extract_recipe

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("scrape_recipe")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("url", help="Recipe page URL")
    parser.add_argument("output_path", type=Path, help="Where to write the HTML document")
    args = parser.parse_args(argv)

    try:
        result = asyncio.run(extract_recipe(args.url))
    except RecipeExportError as exc:
        logger.error("Failed to extract recipe: %s", exc)
        return 1

    args.output_path.parent.mkdir(parents=True, exist_ok=True)
    args.output_path.write_text(build_recipe_document(result.name, result.html), encoding="utf-8")
    logger.info("Written -> %s", args.output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
