import re

import pytest

from services.name_service import NameService

SAFE_NAME = re.compile(r"^[a-z0-9_.-]+-[0-9a-f]{12}$")


@pytest.mark.parametrize("raw", [
    None,
    "",
    "   ",
    "photo.jpg",
    "Mis Vacaciones  2024.JPG",
    "../../etc/passwd",
    "..\\..\\windows\\system32",
    "name\x00with\x00nulls.png",
    "ñandú über café.webp",
    "日本語の写真.png",
    ".hidden",
    "a..b...c.tar.gz",
    "x" * 500,
])
def test_output_is_always_safe(raw):
    result = NameService.make_safe_base_name(raw)

    assert SAFE_NAME.match(result)
    for forbidden in ("/", "\\", "..", "\x00"):
        assert forbidden not in result
    assert not result.startswith(".")


def test_extension_is_stripped_and_whitespace_collapsed():
    result = NameService.make_safe_base_name("My  Holiday\tPhoto.JPEG")

    assert result[:-13] == "my-holiday-photo"


def test_empty_name_uses_default_token():
    assert NameService.make_safe_base_name("").startswith("image-")
    assert NameService.make_safe_base_name("???").startswith("image-")
    assert NameService.make_safe_base_name("日本語").startswith("image-")
    assert NameService.make_safe_base_name("日本語.png").startswith("image-")


def test_same_name_never_collides():
    names = {NameService.make_safe_base_name("same.jpg") for _ in range(200)}

    assert len(names) == 200
