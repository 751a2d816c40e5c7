from plotgrammar.core.colors import is_hex_color, normalize_color
from plotgrammar.core.hashing import hash_description, json_dumps_canonical


def test_normalize_color_forms() -> None:
    assert normalize_color("Light Blue") == "lightblue"
    assert normalize_color("#AABBCC") == "#aabbcc"
    assert normalize_color("grey50") == "#7f7f7f"
    assert normalize_color("gray100") == "#ffffff"
    assert normalize_color("rgb(1, 2, 3)") == "rgb(1,2,3)"
    assert normalize_color(None) is None
    assert normalize_color(21) == 21


def test_is_hex_color() -> None:
    assert is_hex_color("#fff")
    assert is_hex_color("#ffffff80")
    assert not is_hex_color("#ffff")
    assert not is_hex_color("white")


def test_json_dumps_canonical_sorted_and_unicode() -> None:
    s1 = json_dumps_canonical({"b": 2, "a": {"y": 1, "x": "é"}})
    s2 = json_dumps_canonical({"a": {"x": "é", "y": 1}, "b": 2})
    assert s1 == s2 == '{"a":{"x":"é","y":1},"b":2}'


def test_hash_description_order_invariant() -> None:
    d1 = {"layers": [{"geom": "point"}], "labels": {"title": "t"}}
    d2 = {"labels": {"title": "t"}, "layers": [{"geom": "point"}]}
    assert hash_description(d1) == hash_description(d2)
    assert hash_description(d1) != hash_description({"layers": []})
    assert len(hash_description(d1)) == 64
