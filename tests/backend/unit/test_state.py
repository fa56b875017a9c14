from randomencounter.backend.state import (
    DEFAULT_CATEGORY,
    STATE_VERSION,
    all_encounter_ids,
    build_initial_state,
    find_encounter,
    is_rollable,
    select_categories,
)


def test_build_initial_state_has_single_seed_category() -> None:
    state = build_initial_state()

    assert state["version"] == STATE_VERSION
    assert list(state["encounters"]) == [DEFAULT_CATEGORY]
    seed = state["encounters"][DEFAULT_CATEGORY]
    assert len(seed) == 1
    assert seed[0]["uses"] is None
    assert seed[0]["id"] == "0"
    assert "[[2d4 + 4]]" in seed[0]["description"]


def test_build_initial_state_returns_independent_documents() -> None:
    first = build_initial_state()
    second = build_initial_state()

    first["encounters"][DEFAULT_CATEGORY][0]["uses"] = 3

    assert second["encounters"][DEFAULT_CATEGORY][0]["uses"] is None


def test_lookups_span_every_category() -> None:
    encounters = {
        "Forest": [{"description": "Wolves", "uses": None, "id": "a1"}],
        "Swamp": [{"description": "Leeches", "uses": 2, "id": "b2"}],
    }

    assert all_encounter_ids(encounters) == {"a1", "b2"}
    assert find_encounter(encounters, "b2") == ("Swamp", encounters["Swamp"][0])
    assert find_encounter(encounters, "zz") is None


def test_is_rollable_treats_unlimited_and_positive_uses_as_rollable() -> None:
    assert is_rollable({"uses": None}) is True
    assert is_rollable({"uses": 1}) is True
    assert is_rollable({"uses": 0}) is False


def test_select_categories_defaults_to_all_in_store_order() -> None:
    encounters = {"B": [], "A": [], "C": []}

    assert select_categories(encounters, []) == ["B", "A", "C"]
    assert select_categories(encounters, ["C"]) == ["C"]
