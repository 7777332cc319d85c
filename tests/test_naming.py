import pytest

from sentinel.naming import (
    is_camel_case,
    is_constant_case,
    is_pascal_case,
    is_snake_case,
)


@pytest.mark.parametrize("name, expected", [
    ("userName", True),
    ("user", True),
    ("user2Name", True),
    ("UserName", False),
    ("user_name", False),
    ("", False),
])
def test_is_camel_case(name, expected):
    assert is_camel_case(name) is expected


@pytest.mark.parametrize("name, expected", [
    ("UserName", True),
    ("User", True),
    ("userName", False),
    ("User_Name", False),
])
def test_is_pascal_case(name, expected):
    assert is_pascal_case(name) is expected


def test_is_snake_case():
    assert is_snake_case("user_name")
    assert is_snake_case("user")
    assert not is_snake_case("userName")
    assert not is_snake_case("_private")


def test_is_constant_case():
    assert is_constant_case("MAX_SIZE")
    assert is_constant_case("A1")
    assert not is_constant_case("MaxSize")
    assert not is_constant_case("_MAX")
