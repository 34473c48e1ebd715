"""
Element emission for table markup.

A small tag builder on top of markupsafe: attribute values are escaped,
CSS classes are merged, and rendered elements are Markup so templates do not
escape them a second time.
"""

import re
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from markupsafe import Markup, escape

_INVALID_ID_CHARS = re.compile(r'[^A-Za-z0-9_:\-]')

VOID_ELEMENTS = {'input', 'br', 'hr', 'img', 'meta', 'link', 'col', 'area', 'base', 'source', 'wbr'}


class RenderMode(Enum):
    NORMAL = 'normal'
    START_TAG = 'start'
    SELF_CLOSING = 'self-closing'


class TagBuilder:
    """
    Builds a single HTML element.

    Args:
        tag_name: Element name
        attributes: Initial attributes (None values are skipped)
    """

    def __init__(self, tag_name: str, attributes: Optional[Dict[str, Any]] = None):
        self.tag_name = tag_name
        self.attributes: Dict[str, str] = {}
        self.inner_html: Markup = Markup('')
        if attributes:
            self.merge_attributes(attributes)

    def merge_attribute(self, key: str, value: Any, replace: bool = False) -> 'TagBuilder':
        if value is None:
            return self
        if replace or key not in self.attributes:
            self.attributes[key] = str(value)
        return self

    def merge_attributes(self, attributes: Dict[str, Any], replace: bool = False) -> 'TagBuilder':
        for key, value in attributes.items():
            if key == 'class' and value:
                self.add_css_class(value)
            else:
                self.merge_attribute(key, value, replace)
        return self

    def add_css_class(self, value: str) -> 'TagBuilder':
        existing = self.attributes.get('class')
        self.attributes['class'] = f"{existing} {value}" if existing else value
        return self

    def set_inner_text(self, text: Any) -> 'TagBuilder':
        self.inner_html = escape('' if text is None else str(text))
        return self

    def set_inner_html(self, html: Any) -> 'TagBuilder':
        # Plain strings are escaped; Markup passes through unchanged
        self.inner_html = escape(html) if html is not None else Markup('')
        return self

    def _attributes_html(self) -> str:
        return ''.join(
            f' {key}="{escape(value)}"' for key, value in self.attributes.items()
        )

    def render(self, mode: RenderMode = RenderMode.NORMAL) -> Markup:
        attributes = self._attributes_html()
        if mode is RenderMode.START_TAG:
            return Markup(f'<{self.tag_name}{attributes}>')
        if mode is RenderMode.SELF_CLOSING or self.tag_name in VOID_ELEMENTS:
            return Markup(f'<{self.tag_name}{attributes} />')
        return Markup(f'<{self.tag_name}{attributes}>{self.inner_html}</{self.tag_name}>')

    def __html__(self):
        return self.render()

    def __str__(self):
        return str(self.render())


def tag(tag_name: str, content: Any = None, **attributes) -> Markup:
    """
    Render an element in one call.

    Trailing underscores are stripped from attribute names (class_ -> class)
    and remaining underscores become dashes (data_valmsg_for -> data-valmsg-for).

    Example:
        >>> tag('td', 'Total', class_='footer')
        Markup('<td class="footer">Total</td>')
    """
    builder = TagBuilder(tag_name)
    builder.merge_attributes({_attribute_name(k): v for k, v in attributes.items()})
    if content is not None:
        builder.set_inner_html(content)
    return builder.render()


def _attribute_name(name: str) -> str:
    return name.rstrip('_').replace('_', '-')


def join(parts: Iterable[Any]) -> Markup:
    """Concatenate rendered fragments, escaping plain strings."""
    return Markup('').join(parts)


def generate_id_from_name(name: str) -> str:
    """Map a field name such as orders[0].product to an element id (orders_0__product)."""
    return _INVALID_ID_CHARS.sub('_', name)
