"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, template_dir="views", default_locale="en")
    """

    debug: bool = False

    # Templates
    template_dir: str | Path = "templates"
    component_dirs: tuple[str | Path, ...] = ()  # extra template dirs
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Locale used when the request has no usable Accept-Language header
    default_locale: str | None = None

    # Static files (File outcomes and chain.files() without a directory)
    static_dir: str | Path | None = "public"
    cache_control: str = "public, max-age=3600"

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
