from pathlib import Path

from recipe_export.app.services.page_builder import static_filename
from recipe_export.app.services.storage.base import StaticPageWriter


class LocalStaticPageWriter(StaticPageWriter):
    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def write(self, name: str, html: str) -> str:
        return self.write_file(static_filename(name), html)

    def write_file(self, filename: str, html: str) -> str:
        if Path(filename).name != filename:
            raise ValueError(f"Refusing to write outside the output directory: {filename}")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        destination = self.output_dir / filename
        destination.write_text(html, encoding="utf-8")
        return filename
