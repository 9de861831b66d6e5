from __future__ import annotations

from ideaforge.core.orchestrator.parsing import clean_title, fallback_title, parse_numbered_list, split_sentences


def test_numbered_list_round_trip():
    assert parse_numbered_list("1. Alpha\n2. Beta\n3. Gamma") == ["Alpha", "Beta", "Gamma"]


def test_wrapped_lines_join_the_item_in_progress():
    assert parse_numbered_list("1. Alpha\ncontinued\n2. Beta") == ["Alpha continued", "Beta"]


def test_blank_lines_and_indentation_are_ignored():
    text = "  1.   Alpha\n\n   2.Beta\r\n\n3. Gamma\n   and more\n"
    assert parse_numbered_list(text) == ["Alpha", "Beta", "Gamma and more"]


def test_prose_without_numbering_is_sentence_split():
    items = parse_numbered_list("Alpha. Beta. Gamma.")
    assert items == ["Alpha.", "Beta.", "Gamma."]
    assert all(items)


def test_semicolons_and_bullets_split_in_degraded_mode():
    assert parse_numbered_list("• first idea • second idea; third idea") == ["first idea", "second idea", "third idea"]


def test_empty_input_yields_nothing():
    assert parse_numbered_list("") == []
    assert parse_numbered_list("   \n\n ") == []


def test_bare_marker_before_another_marker_yields_empty_item():
    assert parse_numbered_list("1.\n2. Beta\n3. Gamma") == ["", "Beta", "Gamma"]


def test_single_numbered_item_falls_back_without_marker_fragment():
    assert parse_numbered_list("1. Alpha") == ["Alpha"]


def test_split_sentences_keeps_order():
    assert split_sentences("One! Two? Three.") == ["One!", "Two?", "Three."]


def test_clean_title_takes_first_line_and_strips_quotes():
    assert clean_title('  "Moonlit Market"\nextra text') == "Moonlit Market"
    assert clean_title("") == ""


def test_fallback_title_truncates_first_line():
    assert fallback_title("A" * 120 + "\nsecond") == "A" * 80
    assert fallback_title("short idea", limit=5) == "short"


def test_markdown_dash_bullets_split_into_items():
    assert parse_numbered_list("- Kite festival\n- Kite drones\n- Kite boats") == [
        "Kite festival",
        "Kite drones",
        "Kite boats",
    ]


def test_star_bullets_lose_their_marker():
    assert parse_numbered_list("* Kite festival.\n* Kite drones.") == ["Kite festival.", "Kite drones."]


def test_indented_bullets_after_prose_lose_their_marker():
    assert parse_numbered_list("Some ideas.\n  - Kite festival\n  - Kite drones") == [
        "Some ideas.",
        "Kite festival",
        "Kite drones",
    ]


def test_inline_hyphen_is_not_a_bullet():
    assert split_sentences("A low-cost kite - sold at beaches.") == ["A low-cost kite - sold at beaches."]
