from utils.formatting import format_name, format_phone, normalize_phone


def test_normalize_phone():
    assert normalize_phone("(41) 99999-8888") == "41999998888"
    assert normalize_phone(None) == ""


def test_format_phone_masks_progressively():
    assert format_phone("41") == "41"
    assert format_phone("41999") == "(41) 999"
    assert format_phone("41999998888") == "(41) 99999-8888"
    assert format_phone("4199999888877") == "(41) 99999-8888"


def test_format_name_title_cases_and_keeps_particles():
    assert format_name("  JOAO DA SILVA ") == "Joao da Silva"
    assert format_name("de souza e lima") == "De Souza e Lima"
    assert format_name("") == ""
