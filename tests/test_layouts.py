"""Tests for per-type editor layouts."""

from aetherlore.layouts import LAYOUTS, describe, layout_for
from aetherlore.models import EntryType, LoreEntry


def test_every_type_has_a_layout():
    assert set(LAYOUTS) == set(EntryType)


def test_location_gets_banner():
    assert layout_for(LoreEntry(id="x", type=EntryType.LOCATION)).image_slot == "banner"


def test_character_gets_portrait():
    layout = layout_for(LoreEntry(id="x", type=EntryType.CHARACTER))
    assert layout.image_slot == "portrait"
    assert layout.upload_label == "Upload Portrait"


def test_item_gets_icon():
    assert layout_for(LoreEntry(id="x", type=EntryType.ITEM)).image_slot == "icon"


def test_journal_has_no_image_slot():
    view = describe(LoreEntry(id="x", type=EntryType.JOURNAL, image="data:image/png;base64,AA=="))
    assert view["imageSlot"] is None
    assert view["hasImage"] is False


def test_describe_reports_image():
    view = describe(LoreEntry(id="x", type=EntryType.CHARACTER, image="data:image/png;base64,AA=="))
    assert view["hasImage"] is True
    assert view["aspect"] == "3:4"
