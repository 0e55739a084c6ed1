"""The LoreBook record."""

import logging

from aetherlore.lorebook import ValidationError, deserialize, now_ms, serialize
from aetherlore.models import EntryType, LoreBook, LoreEntry

from .core import lorebook_path

logger = logging.getLogger(__name__)

DEFAULT_LOREBOOK = LoreBook(
    name="New World",
    categories=["Characters", "Locations", "History", "Items", "Factions"],
    entries=[
        LoreEntry(
            id="entry-1",
            title="The Crystal Spire",
            keys=["spire", "crystal", "tower"],
            content=(
                "The Crystal Spire stands in the center of the Eternal City. It is said "
                "to focus the ley lines of the world, providing endless magical energy "
                "to the citizens below."
            ),
            category="Locations",
            type=EntryType.LOCATION,
        )
    ],
)


def default_lorebook() -> LoreBook:
    """The starter book, stamped with the current time."""
    entries = [e.model_copy(update={"last_updated": now_ms()}) for e in DEFAULT_LOREBOOK.entries]
    return DEFAULT_LOREBOOK.model_copy(update={"entries": entries})


def load_lorebook() -> LoreBook:
    """Read the stored lorebook, or the default if missing or malformed."""
    path = lorebook_path()
    if not path.is_file():
        return default_lorebook()
    try:
        return deserialize(path.read_bytes())
    except ValidationError as e:
        logger.warning("Stored lorebook at %s is unusable, using defaults: %s", path, e)
        return default_lorebook()


def save_lorebook(book: LoreBook) -> None:
    path = lorebook_path()
    path.write_bytes(serialize(book))
    logger.debug("saved lorebook entries=%d path=%s", len(book.entries), path)
