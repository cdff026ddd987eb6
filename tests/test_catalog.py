import pytest

from lovestruck.pipeline.catalog import FILTERS, OVERLAYS, PROMPTS, Catalog, Filter, Overlay, Selection


def test_filter_order_matches_carousel():
    assert FILTERS.ids == ("normal", "warm", "vintage", "bw", "noir", "soft", "cyber", "cool")


def test_overlay_order():
    assert OVERLAYS.ids == ("none", "hearts", "sparkles", "vignette", "grain")


def test_defaults_are_no_ops():
    assert FILTERS.default.id == "normal"
    assert FILTERS.default.is_identity
    assert FILTERS.default.css == "none"
    assert OVERLAYS.default.kind == "none"


def test_display_css_comes_from_the_same_chain():
    assert FILTERS.get("warm").css == "sepia(30%) contrast(110%) saturate(125%) hue-rotate(-10deg)"
    assert FILTERS.get("cyber").css == "contrast(125%) saturate(150%) hue-rotate(180deg) brightness(110%)"


def test_texture_overlays():
    assert [o.id for o in OVERLAYS if o.is_texture] == ["sparkles", "grain"]


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError):
        Catalog([Filter("a", "A"), Filter("a", "Again")])


def test_unknown_overlay_kind_rejected():
    with pytest.raises(ValueError):
        Overlay("confetti", "Confetti", "confetti")


def test_selection_last_choice_wins():
    selection = Selection(FILTERS)
    assert selection.current is FILTERS.default

    selection.select("noir")
    selection.select("cool")
    assert selection.current.id == "cool"


def test_selection_unknown_id():
    selection = Selection(OVERLAYS)
    with pytest.raises(KeyError):
        selection.select("confetti")
    assert selection.current.id == "none"


def test_prompts_fixed():
    assert len(PROMPTS) == 8
    assert "Big smiles!" in PROMPTS
