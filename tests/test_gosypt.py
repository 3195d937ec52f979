from dataclasses import dataclass, field

from ckman.gosypt import GSYPT, Gosypt

ENC_USER = "ENC(E99D423889FBD0C4CF229E14D0864F68)"
ENC_DIGITS = "ENC(E310E892E56801CED9ED98AA177F18E6)"


@dataclass
class Extras:
    name: str
    value: str


@dataclass
class ConfigTest:
    id: int
    name: str
    encoded: str
    extras: list = field(default_factory=list)
    hobby: list = field(default_factory=list)
    num: list = field(default_factory=list)
    mp: dict = field(default_factory=dict)
    map_str: dict = field(default_factory=dict)
    inner: Extras = None


def test_ensure_password_plain_and_wrapped():
    assert GSYPT.ensure_password("123456") == "123456"
    assert GSYPT.ensure_password(ENC_USER) == "User@123"


def test_unmarshal_nested_structure():
    cfg = ConfigTest(
        id=1,
        name="zhangsan",
        encoded=ENC_USER,
        extras=[Extras("root", ENC_DIGITS), Extras("root", "123456")],
        hobby=[ENC_USER, "123456"],
        num=[1, 2, 3, 4, 5],
        mp={"name": "zhangsan", "code": ENC_DIGITS},
        map_str={"foo": Extras("zhangsan", ENC_DIGITS)},
        inner=Extras("zhangsan", ENC_DIGITS),
    )
    result = GSYPT.unmarshal(cfg)
    assert result is cfg
    assert cfg.id == 1
    assert cfg.name == "zhangsan"
    assert cfg.encoded == "User@123"
    assert cfg.extras == [Extras("root", "123456"), Extras("root", "123456")]
    assert cfg.hobby == ["User@123", "123456"]
    assert cfg.num == [1, 2, 3, 4, 5]
    assert cfg.mp == {"name": "zhangsan", "code": "123456"}
    assert cfg.map_str["foo"].value == "123456"
    assert cfg.inner == Extras("zhangsan", "123456")


def test_unmarshal_bare_string_and_tuple():
    assert GSYPT.unmarshal(ENC_USER) == "User@123"
    assert GSYPT.unmarshal((ENC_DIGITS, 7)) == ("123456", 7)


def test_custom_attribution():
    gs = Gosypt()
    gs.set_attribution("SEC[", "]", "AESWITHHEXANDBASE64")
    assert gs.ensure_password("SEC[E310E892E56801CED9ED98AA177F18E6]") == "123456"
    assert gs.ensure_password(ENC_DIGITS) == ENC_DIGITS


def test_unknown_algorithm_leaves_value():
    gs = Gosypt(algorithm="NONE")
    assert gs.ensure_password(ENC_DIGITS) == ENC_DIGITS