"""Template and File outcome types.

Frozen dataclasses that handlers return (or pass to ``ctx.render()``).
The renderer inspects these to dispatch to the kida environment or the
static file system.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Template:
    """Render a kida template by name.

    Usage::

        return Template("page.html", title="Greeting", content="Hello World!")
        return Template("no_localized.txt")

    ``locale`` pins the variant to try first (``page_fr.html`` for
    ``"fr"``); by default the request locale is used.
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)
    locale: str | None = None

    def __init__(self, name: str, /, *, locale: str | None = None, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)
        object.__setattr__(self, "locale", locale)


@dataclass(frozen=True, slots=True)
class File:
    """Send a file from the app's static directory.

    Usage::

        return File("reports/latest.pdf")
    """

    path: str
