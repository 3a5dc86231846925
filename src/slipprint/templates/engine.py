"""Abstract base class for template engines."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from slipprint.models.template import PrintTemplate


class BaseTemplateEngine(ABC):
    """Abstract base class for template engines."""

    @abstractmethod
    def render(self, template: PrintTemplate, context: Mapping[str, Any]) -> bytes:
        """Render a template with the given context.

        Args:
            template: The print template.
            context: Placeholder values to substitute.

        Returns:
            Rendered printer commands as bytes.

        Raises:
            TemplateError: If rendering fails.
        """
        pass


class TemplateError(Exception):
    """Exception raised for template rendering errors."""

    pass
