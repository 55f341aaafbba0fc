"""Template rendering for text notifications using Jinja2.

This module wraps Jinja2 template rendering with caching and strict
undefined checking to catch template errors early.
"""

import logging
from typing import Any, Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders WhatsApp text messages from templates in
    listing_alerts.notifications.message_templates.

    Templates are cached by the Jinja2 environment for reuse.
    """

    def __init__(
        self,
        template_dir: str = "message_templates",
        text_template: str = "listing_offer.txt.j2",
    ):
        """Initialize template renderer with Jinja2 environment.

        Args:
            template_dir: Directory name within the listing_alerts.notifications package
            text_template: Filename of the message body template
        """
        self.text_template_name = text_template

        # WhatsApp bodies are plain text, so no HTML escaping
        self.env = Environment(
            loader=PackageLoader("listing_alerts.notifications", template_dir),
            autoescape=False,
            undefined=StrictUndefined,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render(self, context: Dict[str, Any]) -> str:
        """Render the message body.

        Args:
            context: Dictionary of template variables

        Returns:
            Rendered body with surrounding whitespace stripped

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        try:
            template = self.env.get_template(self.text_template_name)
            body = template.render(context).strip()
        except TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e

        logger.debug(f"Rendered message template for listing in {context.get('city', 'unknown')}")
        return body
