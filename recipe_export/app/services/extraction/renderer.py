"""HTML projection of a canonical recipe, plus the allow-list sanitizer."""

from typing import List
from urllib.parse import urlparse

from bs4 import BeautifulSoup, NavigableString

from recipe_export.app.services.extraction.models import Recipe

ALLOWED_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6", "p", "ul", "ol", "li", "strong", "em", "br", "img"}
ALLOWED_ATTRIBUTES = {
    "img": {"src", "alt", "style"},
    "*": {"style"},
}
ALLOWED_STYLES = {"width": "100%", "max-width": "100%"}
ALLOWED_URL_SCHEMES = {"http", "https", ""}
# Disallowed tags whose text must not leak into the output.
DROP_CONTENT_TAGS = ["script", "style", "textarea", "noscript", "option"]

TIME_SECTIONS = (
    ("prep_time", "Prep Time"),
    ("cook_time", "Cook Time"),
    ("total_time", "Total Time"),
)


def render_recipe_html(recipe: Recipe) -> str:
    """Render the recipe into the fixed Recipe Keeper layout.

    Values are inserted verbatim; run the result through ``sanitize_html``
    before handing it to a browser.
    """
    out: List[str] = []
    if recipe.name:
        out.append(f"<h1>{recipe.name}</h1>")
    if recipe.description:
        out.append(f"<p>{recipe.description}</p>")
    if recipe.image:
        out.append(f"<img src='{recipe.image}' style='max-width:100%'><br>")
    if recipe.ingredients:
        out.append("<h2>Ingredients</h2><ul>")
        out.extend(f"<li>{ingredient}</li>" for ingredient in recipe.ingredients)
        out.append("</ul>")
    if recipe.serving_size:
        out.append(f"<h2>Serving Size</h2><p>{recipe.serving_size}</p>")
    for field, heading in TIME_SECTIONS:
        value = getattr(recipe, field)
        if value:
            out.append(f"<h2>{heading}</h2><p>{value}</p>")
    if recipe.instructions:
        out.append("<h2>Cooking Instructions</h2>")
        for step in recipe.instructions:
            if step.title:
                out.append(f"<h3>{step.title}</h3>")
            if step.items:
                out.append("<ol>")
                out.extend(f"<li>{item}</li>" for item in step.items)
                out.append("</ol>")
    if not recipe.nutrition.is_empty():
        out.append("<h2>Nutrition (per serving)</h2><ul>")
        for key, value in recipe.nutrition.model_dump().items():
            if value:
                out.append(f"<li><strong>{key}:</strong> {value}</li>")
        out.append("</ul>")
    return "".join(out)


def _filter_style(style: str) -> str:
    kept: List[str] = []
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        prop = prop.strip().lower()
        value = value.strip()
        if ALLOWED_STYLES.get(prop) == value:
            kept.append(f"{prop}:{value}")
    return ";".join(kept)


def _is_allowed_url(url: str) -> bool:
    return urlparse(url.strip()).scheme.lower() in ALLOWED_URL_SCHEMES


def sanitize_html(html: str) -> str:
    """Reduce markup to the tags, attributes and styles Recipe Keeper accepts."""
    soup = BeautifulSoup(html, "html.parser")
    # Only plain text survives; comments, CDATA, doctypes and processing
    # instructions are written back out verbatim by bs4.
    for node in soup.find_all(string=lambda text: type(text) is not NavigableString):
        node.extract()
    for tag in soup.find_all(DROP_CONTENT_TAGS):
        tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        allowed = ALLOWED_ATTRIBUTES.get(tag.name, set()) | ALLOWED_ATTRIBUTES["*"]
        for attr in list(tag.attrs):
            if attr not in allowed:
                del tag[attr]
        if "style" in tag.attrs:
            style = _filter_style(tag["style"])
            if style:
                tag["style"] = style
            else:
                del tag["style"]
        if tag.name == "img" and "src" in tag.attrs and not _is_allowed_url(tag["src"]):
            del tag["src"]
    return str(soup)
