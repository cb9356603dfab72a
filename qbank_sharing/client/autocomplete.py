"""
Searchable autocomplete built from a plain ``<select>`` in fragment markup.
"""
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import List, Optional, Tuple


@dataclass
class Option:
    value: str
    label: str
    selected: bool = False


@dataclass
class AutocompleteField:
    selector: str
    placeholder: str
    options: List[Option] = field(default_factory=list)
    tags: bool = False
    ajax: str = ""
    case_sensitive: bool = False
    show_suggestions: bool = True
    no_selection_string: str = ""
    close_suggestions_on_select: bool = True

    def search(self, query: str) -> List[Option]:
        if not query:
            return list(self.options)
        if self.case_sensitive:
            return [o for o in self.options if query in o.label]
        query = query.lower()
        return [o for o in self.options if query in o.label.lower()]

    @property
    def selected(self) -> Optional[Option]:
        return next((o for o in self.options if o.selected), None)


class _SelectParser(HTMLParser):
    """Collects the options of the first select matching ``#id`` or ``.class``."""

    def __init__(self, selector: str):
        super().__init__()
        self.kind, self.name = selector[0], selector[1:]
        self.found = False
        self.inside = False
        self.current: Optional[Tuple[str, bool]] = None
        self.label: List[str] = []
        self.options: List[Option] = []

    def _matches(self, attrs) -> bool:
        attrs = dict(attrs)
        if self.kind == "#":
            return attrs.get("id") == self.name
        return self.name in (attrs.get("class") or "").split()

    def handle_starttag(self, tag, attrs):
        if tag == "select" and not self.found and self._matches(attrs):
            self.found = self.inside = True
        elif tag == "option" and self.inside:
            values = dict(attrs)
            self.current = (values.get("value") or "", "selected" in values)
            self.label = []

    def handle_data(self, data):
        if self.current is not None:
            self.label.append(data)

    def handle_endtag(self, tag):
        if tag == "option" and self.current is not None:
            value, selected = self.current
            self.options.append(Option(value=value, label="".join(self.label).strip(), selected=selected))
            self.current = None
        elif tag == "select" and self.inside:
            self.inside = False


def enhance(markup: str, selector: str, tags: bool = False, ajax: str = "", placeholder: str = "",
            case_sensitive: bool = False, show_suggestions: bool = True, no_selection_string: str = "",
            close_suggestions_on_select: bool = True) -> AutocompleteField:
    """Turn the select matching ``selector`` into an autocomplete field."""
    if not selector or selector[0] not in "#.":
        raise ValueError(f"Unsupported selector: {selector!r}")
    parser = _SelectParser(selector)
    parser.feed(markup)
    parser.close()
    if not parser.found:
        raise LookupError(f"No select matches {selector!r}")
    return AutocompleteField(
        selector=selector,
        placeholder=placeholder,
        options=parser.options,
        tags=tags,
        ajax=ajax,
        case_sensitive=case_sensitive,
        show_suggestions=show_suggestions,
        no_selection_string=no_selection_string,
        close_suggestions_on_select=close_suggestions_on_select,
    )
