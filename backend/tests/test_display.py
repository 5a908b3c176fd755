from factories import text
from termserve.domain.terminology.display import (
    match_display,
    preferred_first,
    resolve_definition,
    resolve_designations,
    resolve_display,
)
from termserve.domain.terminology.models import Designation


# ------------------------------------------------------------------
# Ordering
# ------------------------------------------------------------------
def test_preferred_first_is_stable_within_buckets():
    names = [text("n1"), text("p1", preferred=True), text("n2"), text("p2", preferred=True)]
    assert [n.name for n in preferred_first(names)] == ["p1", "p2", "n1", "n2"]


def test_preferred_first_skips_missing_entries():
    assert [n.name for n in preferred_first([None, text("a")])] == ["a"]


# ------------------------------------------------------------------
# Display
# ------------------------------------------------------------------
def test_requested_language_wins():
    names = [text("Hello", "en", preferred=True), text("Hola", "es")]
    assert resolve_display(names, "es", "en") == "Hola"


def test_falls_back_to_default_locale():
    names = [text("Bonjour", "fr"), text("Hello", "en")]
    assert resolve_display(names, "de", "en") == "Hello"


def test_falls_back_to_first_preferred_name_of_any_locale():
    names = [text("Bonjour", "fr"), text("Hallo", "de", preferred=True)]
    assert resolve_display(names, None, "en") == "Hallo"


def test_preferred_name_wins_within_a_locale():
    names = [text("Synonym", "en"), text("Preferred", "en", preferred=True)]
    assert resolve_display(names, None, "en") == "Preferred"


def test_no_names_has_no_display():
    assert resolve_display([], "en", "en") is None


# ------------------------------------------------------------------
# Designations
# ------------------------------------------------------------------
def test_designations_filtered_by_language():
    names = [text("Hello", "en", type="FULLY_SPECIFIED"), text("Hola", "es")]
    assert resolve_designations(names, "es") == [Designation(language="es", use=None, value="Hola")]


def test_designations_all_names_without_language():
    names = [text("Hello", "en", type="FULLY_SPECIFIED"), text("Hola", "es")]
    result = resolve_designations(names, None)
    assert [d.value for d in result] == ["Hello", "Hola"]
    assert result[0].use == "FULLY_SPECIFIED"


# ------------------------------------------------------------------
# Display match
# ------------------------------------------------------------------
def test_match_display_is_exact_and_case_sensitive():
    names = [text("Hello", "en")]
    assert match_display(names, "Hello", None)
    assert not match_display(names, "hello", None)


def test_match_display_respects_language():
    names = [text("Hello", "en"), text("Hola", "es")]
    assert match_display(names, "Hola", "es")
    assert not match_display(names, "Hola", "en")


def test_definition_uses_definition_descriptions_only():
    descriptions = [text("Short note", type="Note"), text("A definition", type="DEFINITION")]
    assert resolve_definition(descriptions, "en") == "A definition"
    assert resolve_definition([text("Short note", type="Note")], "en") is None
