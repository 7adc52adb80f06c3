import pytest

from dfsproj.identity import name_similarity, normalize_name


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Mike Trout", "michael trout"),
        ("Trout, Mike", "michael trout"),
        ("Ken Griffey Jr.", "ken griffey"),
        ("Griffey Jr., Ken", "ken griffey"),
        ("Griffey, Ken, Jr.", "ken griffey"),
        ("Cal Ripken III", "cal ripken"),
        ("  Travis   d'Arnaud ", "travis darnaud"),
        ("Ke'Bryan Hayes", "kebryan hayes"),
        ("José Ramírez", "jose ramirez"),
        ("Smith, Billy", "william smith"),
        ("Bill Smith", "william smith"),
        ("Jr.", "jr"),
    ],
)
def test_normalize_name_examples(raw, expected):
    assert normalize_name(raw) == expected


@pytest.mark.parametrize("raw", [None, "", 42, ["Mike Trout"], "   ", ",,,"])
def test_normalize_name_handles_malformed_input(raw):
    assert normalize_name(raw) == ""


@pytest.mark.parametrize(
    "raw",
    [
        "Mike Trout",
        "Griffey Jr., Ken",
        "Jr., Sr.",
        "St. Louis, Bobby, II",
        "Jr. Jr.",
        "O'Neil Cruz",
        "İsmail Ça",
        "Will, Bill Jr",
        "Acuña Jr., Ronald",
    ],
)
def test_normalize_name_is_idempotent(raw):
    once = normalize_name(raw)
    assert normalize_name(once) == once


def test_similarity_identity_and_empty_names():
    assert name_similarity("Aaron Judge", "Judge, Aaron") == 1.0
    assert name_similarity("", "") == 1.0
    assert name_similarity(None, 7) == 1.0
    assert name_similarity("Aaron Judge", "") == 0.0


def test_similarity_is_symmetric_and_bounded():
    pairs = [
        ("Aaron Judge", "Aron Judge"),
        ("Mookie Betts", "Mookie Bets"),
        ("Gerrit Cole", "Garrett Cooper"),
        ("Pete Alonso", "Xander Bogaerts"),
    ]
    for left, right in pairs:
        score = name_similarity(left, right)
        assert 0.0 <= score <= 1.0
        assert score == name_similarity(right, left)


def test_similarity_uses_edit_distance_over_longest_name():
    # "aron judge" vs "aaron judge": one insertion over eleven characters
    assert name_similarity("Aron Judge", "Aaron Judge") == pytest.approx(1 - 1 / 11)
