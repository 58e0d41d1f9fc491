"""Templates: the kida environment and the renderer built on it.

One environment is built when the app compiles and is shared by every
request. Localized variants are separate files named ``page_<locale>.html``
next to ``page.html``.
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from kida import ChoiceLoader, Environment, FileSystemLoader
from kida.environment.exceptions import TemplateNotFoundError

from perch.config import AppConfig
from perch.errors import TemplateNotFound

logger = logging.getLogger("perch.templating")


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]],
    globals_: dict[str, Any],
) -> Environment:
    """Build the kida environment for *config*.

    ``template_dir`` is searched first, then each of ``component_dirs``.
    """
    loaders = [FileSystemLoader(str(config.template_dir))]
    loaders.extend(FileSystemLoader(str(d)) for d in config.component_dirs)

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )

    if filters:
        env.update_filters(filters)

    for name, value in globals_.items():
        env.add_global(name, value)

    return env


def localized_name(name: str, locale: str) -> str:
    """Name of the *locale* variant of template *name*.

    ``localized_name("page.html", "en_US") -> "page_en_US.html"``
    """
    path = Path(name)
    return str(path.with_name(f"{path.stem}_{locale}{path.suffix}"))


def locale_candidates(locale: str | None) -> list[str | None]:
    """Locales to try for a template, most specific first.

    ``"en-US"`` -> ``["en_US", "en", None]``, where ``None`` is the
    locale-neutral default template.
    """
    if not locale:
        return [None]
    normalized = locale.replace("-", "_")
    candidates: list[str | None] = [normalized]
    language = normalized.split("_", 1)[0]
    if language and language != normalized:
        candidates.append(language)
    candidates.append(None)
    return candidates


class TemplateRenderer:
    """The template collaborator: renders one exact template variant.

    ``render_template`` does no fallback of its own. It raises
    ``TemplateNotFound`` when the requested (localized) name does not
    exist, and the renderer decides what to try next.
    """

    __slots__ = ("_env",)

    def __init__(self, env: Environment) -> None:
        self._env = env

    @property
    def env(self) -> Environment:
        return self._env

    def render_template(
        self,
        name: str,
        locale: str | None,
        variables: Mapping[str, Any],
    ) -> str:
        template_name = localized_name(name, locale) if locale else name
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFoundError:
            raise TemplateNotFound(template_name) from None
        return template.render(dict(variables))

    def render_localized(
        self,
        name: str,
        locale: str | None,
        variables: Mapping[str, Any],
    ) -> str:
        """Render the most specific variant of *name* that exists.

        Raises ``TemplateNotFound`` (for the base name) when no variant
        exists, including the locale-neutral one.
        """
        for candidate in locale_candidates(locale):
            try:
                return self.render_template(name, candidate, variables)
            except TemplateNotFound:
                logger.debug("No %s variant of template %r", candidate or "default", name)
        raise TemplateNotFound(name)
