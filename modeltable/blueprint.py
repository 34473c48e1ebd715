"""
Flask integration.

Registers the client script as a static asset and exposes the table helpers
to Jinja templates:

    {{ table_editor_for(view, 'lines') }}
    <script src="{{ modeltable_script_url() }}"></script>
"""

from typing import Any, Optional

from flask import Blueprint, Flask, url_for
from markupsafe import Markup

from .config import TableSettings, configure
from .logger import logger
from .template.rendering import UrlBuilder, default_url_builder, hidden_input_for, table_editor_for
from .template.rendering import table_display_for as _table_display_for

SCRIPT_FILENAME = 'modeltable-table.js'

# Create blueprint
bp = Blueprint('modeltable', __name__, static_folder='static', static_url_path='/modeltable/static')

# Link builder used by table_display_for in templates (set by init_app)
_url_builder: UrlBuilder = default_url_builder


def table_display_for(model: Any, expression: str, url_builder: Optional[UrlBuilder] = None) -> Markup:
    """table_display_for() using the link builder given to init_app."""
    return _table_display_for(model, expression, url_builder or _url_builder)


def modeltable_script_url() -> str:
    """URL of the client script served by the blueprint."""
    return url_for('modeltable.static', filename=SCRIPT_FILENAME)


def init_app(app: Flask, url_builder: Optional[UrlBuilder] = None) -> TableSettings:
    """
    Initialize table rendering for a Flask application.

    Settings are read from app.config keys prefixed with MODELTABLE_.

    Args:
        app: Flask application
        url_builder: Callable (controller, action, id) -> url for table links;
            url_for('<controller>.<action>', id=id) by default

    Returns:
        The settings in effect
    """
    global _url_builder
    _url_builder = url_builder or default_url_builder

    settings = configure(TableSettings.from_env(app.config))

    if 'modeltable' not in app.blueprints:
        app.register_blueprint(bp)

    app.add_template_global(table_display_for, 'table_display_for')
    app.add_template_global(table_editor_for, 'table_editor_for')
    app.add_template_global(hidden_input_for, 'hidden_input_for')
    app.add_template_global(modeltable_script_url, 'modeltable_script_url')

    logger.info("Table rendering initialized for %s", app.name)
    return settings
