from randomencounter.backend.macros import build_macros, category_query, escape_query_option


def test_build_macros_covers_every_command() -> None:
    macros = build_macros(["Forest"])

    names = [macro.name for macro in macros]
    assert names == [
        "RandomEncounter-add-category",
        "RandomEncounter-add",
        "RandomEncounter-delete",
        "RandomEncounter-update",
        "RandomEncounter-display",
        "RandomEncounter-roll",
        "RandomEncounter-export",
    ]
    assert all(macro.action.startswith("!encounter ") for macro in macros)


def test_category_prompts_list_current_names() -> None:
    macros = {macro.name: macro.action for macro in build_macros(["Forest", "Mountains"])}

    assert macros["RandomEncounter-roll"] == "!encounter roll|?{Category|All,|Forest|Mountains}"
    assert macros["RandomEncounter-add"].startswith("!encounter add|?{Category|Forest|Mountains}|")


def test_query_options_escape_special_characters() -> None:
    assert escape_query_option("Caves, Deep|Dark}") == "Caves&#44; Deep&#124;Dark&#125;"


def test_category_query_without_categories_falls_back_to_free_text() -> None:
    assert category_query([]) == "?{Category name}"
    assert category_query([], include_all=True) == "?{Category|All,}"
