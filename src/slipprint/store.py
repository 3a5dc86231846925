"""File-backed template store with an active template pointer."""

import hashlib
import logging
import re
from pathlib import Path

import yaml

from slipprint.models.template import DEFAULT_TEMPLATE, PrintTemplate, ensure_valid

logger = logging.getLogger(__name__)

ACTIVE_FILE = "_active.yaml"


def template_filename(name: str) -> str:
    """File name for a template: readable slug plus a short hash of the name.

    The hash keeps names that slug identically (``"A B"`` and ``"A-B"``)
    in separate files.
    """
    slug = re.sub(r"[^\w-]+", "-", name).strip("-").lower() or "template"
    digest = hashlib.md5(name.encode("utf-8")).hexdigest()[:8]
    return f"{slug}-{digest}.yaml"


class TemplateStore:
    """Persists templates as one YAML file each, keyed by template name.

    The store is never empty from the caller's point of view: with nothing
    saved it reports the default template, and the active pointer falls
    back to the default when it names a template that no longer exists.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / template_filename(name)

    def save(self, template: PrintTemplate) -> Path:
        """Validate and save a template, replacing any with the same name.

        Raises:
            TemplateValidationError: If the template fails validation.
        """
        ensure_valid(template)
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(template.name)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(template.to_storage(), f, allow_unicode=True, sort_keys=False)
        logger.info(f"Saved template '{template.name}' to {path}")
        return path

    def _load_saved(self) -> list[PrintTemplate]:
        templates: list[PrintTemplate] = []
        if not self.directory.exists():
            return templates

        for path in sorted(self.directory.glob("*.yaml")):
            if path.name.startswith("_"):
                continue
            try:
                with open(path, encoding="utf-8") as f:
                    data = yaml.safe_load(f)
                if data:
                    templates.append(PrintTemplate.model_validate(data))
            except Exception as e:
                logger.warning(f"Failed to load template {path}: {e}")
        return templates

    def load_all(self) -> list[PrintTemplate]:
        """Load every saved template, or the default template if none are saved."""
        return self._load_saved() or [DEFAULT_TEMPLATE]

    def get(self, name: str) -> PrintTemplate | None:
        """Get a template by name."""
        for template in self.load_all():
            if template.name == name:
                return template
        return None

    def delete(self, name: str) -> None:
        """Delete a template by name.

        Deleting the active template makes the default template active.
        """
        path = self._path(name)
        if path.exists():
            path.unlink()
            logger.info(f"Deleted template '{name}'")

        if self.active_name() == name:
            self.set_active(DEFAULT_TEMPLATE.name)

    def set_active(self, name: str) -> None:
        """Point the active template at ``name``."""
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self.directory / ACTIVE_FILE, "w", encoding="utf-8") as f:
            yaml.safe_dump({"name": name}, f, allow_unicode=True)

    def active_name(self) -> str | None:
        """Name stored in the active pointer, if any."""
        path = self.directory / ACTIVE_FILE
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Failed to read active template pointer: {e}")
            return None
        return data.get("name")

    def get_active(self) -> PrintTemplate:
        """Get the active template, falling back to the default template."""
        name = self.active_name()
        if name:
            template = self.get(name)
            if template:
                return template
            logger.warning(f"Active template '{name}' not found, using default")
        return DEFAULT_TEMPLATE
