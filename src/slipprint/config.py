"""Configuration management for slipprint."""

import json
import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from slipprint.models.printer import PrinterConfig
from slipprint.models.template import PrintTemplate, validate_template
from slipprint.templates.converters.escpos import DEFAULT_FEED_LINES
from slipprint.templates.fonts import FontManager, split_families

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = {".yaml", ".yml", ".json"}


class TemplateLoadResult(BaseModel):
    """Result of loading templates, including any warnings."""

    templates: dict[str, PrintTemplate] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


class AppConfig(BaseModel):
    """Application configuration loaded from config.yaml."""

    templates_dir: Path = Path("./templates")
    fonts_dir: Path = Path("./fonts")
    # Template used when a job does not name one; falls back to the store's pointer
    active_template: str | None = None
    printers: list[PrinterConfig] = Field(default_factory=list)
    default_printer: str | None = None
    feed_lines: int = DEFAULT_FEED_LINES

    def get_printer(self, name: str | None = None) -> PrinterConfig | None:
        """Get a printer by name, or the default/first enabled printer."""
        name = name or self.default_printer
        for printer in self.printers:
            if not printer.enabled:
                continue
            if name is None or printer.name == name:
                return printer
        return None


class Settings(BaseSettings):
    """Environment-based settings."""

    model_config = SettingsConfigDict(
        env_prefix="SLIPPRINT_",
        env_file=".env",
        extra="ignore",
    )

    config_file: Path = Path("config.yaml")
    debug: bool = False


def load_config(config_path: Path) -> AppConfig:
    """Load application configuration from YAML file."""
    if not config_path.exists():
        return AppConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    # YAML gives None for empty keys
    if data.get("printers") is None:
        data["printers"] = []

    config = AppConfig.model_validate(data)

    # Relative directories are relative to the config file
    base = config_path.parent
    if not config.templates_dir.is_absolute():
        config.templates_dir = base / config.templates_dir
    if not config.fonts_dir.is_absolute():
        config.fonts_dir = base / config.fonts_dir

    return config


def read_template_file(path: Path) -> PrintTemplate:
    """Read a template from a YAML or JSON file.

    The template name defaults to the file stem when the file has none.

    Raises:
        ValueError: If the file is empty or not a mapping.
        pydantic.ValidationError: If the data does not describe a template.
    """
    with open(path, encoding="utf-8") as f:
        if path.suffix == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a template mapping")

    data.setdefault("name", path.stem)
    return PrintTemplate.model_validate(data)


def _missing_fonts(template: PrintTemplate, font_manager: FontManager) -> list[str]:
    """Return the template's font family if none of its entries resolve."""
    family = template.settings.font_family
    for name in split_families(family):
        if font_manager._find_font(name) is not None:
            return []
    return [family]


def load_templates(templates_dir: Path, fonts_dir: Path | None = None) -> TemplateLoadResult:
    """Load all templates from a directory.

    Files starting with an underscore are skipped. Templates that fail to
    parse are logged and skipped; templates that parse but fail validation
    are skipped with a warning for the user. Templates whose fonts cannot
    be found are kept (the default font is used) but produce a warning.

    Args:
        templates_dir: Directory containing template YAML/JSON files.
        fonts_dir: Directory with extra fonts for the font check.

    Returns:
        TemplateLoadResult with templates dict and any warnings.
    """
    result = TemplateLoadResult()

    if not templates_dir.exists():
        return result

    font_manager = FontManager(custom_paths=[fonts_dir] if fonts_dir and fonts_dir.exists() else None)

    for template_file in sorted(templates_dir.iterdir()):
        if template_file.suffix not in TEMPLATE_SUFFIXES or template_file.name.startswith("_"):
            continue

        try:
            template = read_template_file(template_file)
        except Exception as e:
            # Log but don't fail on individual template errors
            logger.warning(f"Failed to load template {template_file}: {e}")
            continue

        errors = validate_template(template)
        if errors:
            logger.error(f"Template '{template.name}' is invalid: {'; '.join(errors)}. Skipping template.")
            result.warnings.append(f"Template '{template.name}' skipped: {'; '.join(errors)}")
            continue

        missing = _missing_fonts(template, font_manager)
        if missing:
            result.warnings.append(
                f"Template '{template.name}': font '{missing[0]}' not found, the default font will be used"
            )

        result.templates[template.name] = template

    return result


# Global settings instance
settings = Settings()
