"""File-based JSON storage for the two durable records.

Data layout:
  data/
    lorebook.json    The whole LoreBook (same pretty-printed JSON as an export)
    settings.json    AppSettings (theme + AI provider settings)

Both records are read once at startup and rewritten wholesale after every
mutation. A missing or malformed record falls back to the built-in default
(logged, never fatal).

Settings: update_settings() applies partial updates — scalars overwritten,
the "ai" block merged key-by-key — and validates before persisting.
"""

# Re-export all public symbols so `from aetherlore import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
    lorebook_path,
    settings_path,
)

from .lorebook import (  # noqa: F401
    DEFAULT_LOREBOOK,
    default_lorebook,
    load_lorebook,
    save_lorebook,
)

from .config import (  # noqa: F401
    DEFAULT_SETTINGS,
    load_settings,
    save_settings,
    update_settings,
)
