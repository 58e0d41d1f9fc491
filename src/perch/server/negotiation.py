"""Content negotiation — maps handler outcomes to Response objects.

isinstance-based dispatch, no magic, fully predictable. Template
expansion and file reads are delegated to the collaborators passed in.
"""

import json as json_module
import mimetypes
from typing import Any

from perch.errors import ConfigurationError, HandlerFailure, TemplateNotFound
from perch.files import FileSystem, serve_file
from perch.http.response import Response
from perch.templating.integration import TemplateRenderer
from perch.templating.returns import File, Template


def negotiate(
    value: Any,
    *,
    templates: TemplateRenderer | None = None,
    files: FileSystem | None = None,
    locale: str | None = None,
    cache_control: str = "public, max-age=3600",
) -> Response:
    """Convert a handler outcome to a Response.

    Dispatch order:

    1. ``Response``            -> pass through
    2. ``Template``            -> render via kida (locale fallback) -> Response
    3. ``File``                -> bytes from the static file system
    4. ``str``                 -> 200, text/plain
    5. ``bytes``               -> 200, application/octet-stream
    6. ``dict`` / ``list``     -> 200, application/json
    7. ``None``                -> 200, empty body
    8. ``(value, int)``        -> negotiate value, override status
    9. ``(value, int, dict)``  -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case Template():
            if templates is None:
                msg = (
                    "Template outcomes require kida integration. "
                    "Ensure a template_dir is configured in AppConfig."
                )
                raise ConfigurationError(msg)
            return _render_template(value, templates, locale)
        case File():
            if files is None:
                msg = "File outcomes require AppConfig.static_dir to be set."
                raise ConfigurationError(msg)
            return serve_file(files.resolve(value.path), cache_control=cache_control)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json",
            )
        case None:
            return Response(body="")
        case (inner, int() as status):
            return negotiate(
                inner,
                templates=templates,
                files=files,
                locale=locale,
                cache_control=cache_control,
            ).with_status(status)
        case (inner, int() as status, dict() as headers):
            return (
                negotiate(
                    inner,
                    templates=templates,
                    files=files,
                    locale=locale,
                    cache_control=cache_control,
                )
                .with_status(status)
                .with_headers(headers)
            )
        case _:
            msg = f"Cannot convert {type(value).__name__} to a response."
            raise ConfigurationError(msg)


def _render_template(value: Template, templates: TemplateRenderer, locale: str | None) -> Response:
    try:
        body = templates.render_localized(value.name, value.locale or locale, value.context)
    except TemplateNotFound as exc:
        raise HandlerFailure(f"No variant of template {value.name!r} exists") from exc
    return Response(body=body, content_type=_template_content_type(value.name))


def _template_content_type(name: str) -> str:
    content_type, _ = mimetypes.guess_type(name)
    if content_type is None:
        content_type = "text/html"
    return f"{content_type}; charset=utf-8"
