from dataclasses import FrozenInstanceError

import pytest

from nodelistdb.flags import (
    FlagInfo,
    ParserFlagInfo,
    get_flag_descriptions,
    get_parser_flag_map,
)


def test_binkp_flag_is_internet_with_value():
    info = get_flag_descriptions()["IBN"]
    assert info.category == "internet"
    assert info.has_value is True
    assert info.description == "BinkP"


def test_modem_flag_has_no_value():
    info = get_flag_descriptions()["V34"]
    assert info.category == "modem"
    assert info.has_value is False
    assert "V.34" in info.description


def test_capability_flag():
    info = get_flag_descriptions()["CM"]
    assert info == FlagInfo("capability", False, "Continuous Mail")


def test_categories_are_known():
    categories = {info.category for info in get_flag_descriptions().values()}
    assert categories == {"modem", "internet", "capability", "schedule", "user"}


def test_internet_and_schedule_flags_take_values():
    for info in get_flag_descriptions().values():
        if info.category in ("internet", "schedule"):
            assert info.has_value
        else:
            assert not info.has_value


def test_parser_map_matches_descriptions():
    descriptions = get_flag_descriptions()
    parser_map = get_parser_flag_map()
    assert set(parser_map) == set(descriptions)
    for name, info in parser_map.items():
        assert info == ParserFlagInfo(
            descriptions[name].category, descriptions[name].has_value
        )


def test_returned_map_is_a_fresh_copy():
    first = get_flag_descriptions()
    del first["IBN"]
    assert "IBN" in get_flag_descriptions()


def test_flag_info_is_frozen():
    info = get_flag_descriptions()["MO"]
    with pytest.raises(FrozenInstanceError):
        info.category = "modem"  # type: ignore[misc]
    assert info.category == "capability"
    assert info.description == "Mail Only"


def test_flag_info_to_dict():
    info = get_flag_descriptions()["U"]
    assert info.to_dict() == {
        "category": "schedule",
        "has_value": True,
        "description": "Availability",
    }