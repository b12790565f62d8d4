import pytest

from models.ingestion_model import TargetIngestionService, iter_targets, split_targets


@pytest.mark.parametrize(
    "line,expected",
    [
        ("a.com,b.com", ["a.com", "b.com"]),
        ("a.com;b.com", ["a.com", "b.com"]),
        ("a.com b.com\tc.com", ["a.com", "b.com", "c.com"]),
        ("a.com,  b.com;c.com", ["a.com", "b.com;c.com"]),
        ("a.com;b.com c.com", ["a.com", "b.com c.com"]),
        (",,a.com, ,", ["a.com"]),
        ("10.0.0.1", ["10.0.0.1"]),
        ("[::1]:443", ["[::1]:443"]),
    ],
)
def test_split_targets_precedence(line, expected):
    assert split_targets(line) == expected


def test_space_split_disabled_when_line_has_a_colon():
    # Known limitation: one host:port token keeps the whole line together.
    assert split_targets("1.1.1.1:80 2.2.2.2") == ["1.1.1.1:80 2.2.2.2"]
    assert split_targets("::1 ::2") == ["::1 ::2"]


def test_colon_targets_split_with_commas():
    assert split_targets("1.1.1.1:80, ::1, example.com:8443") == [
        "1.1.1.1:80",
        "::1",
        "example.com:8443",
    ]


def test_iter_targets_keeps_line_numbers_and_skips_comments():
    text = "10.0.0.1\n\n# comment\n  \nexample.com, 10.0.0.2\r\n"

    assert list(iter_targets(text)) == [
        (1, "10.0.0.1"),
        (5, "example.com"),
        (5, "10.0.0.2"),
    ]


def test_iter_targets_strips_bom():
    assert list(iter_targets("\ufeff10.0.0.1\n")) == [(1, "10.0.0.1")]


def test_ingestion_service_builds_entries():
    ingestor = TargetIngestionService(log_level="ERROR")

    entries = ingestor.ingest("local/test", "# header\n10.0.0.1;10.0.0.2\nexample.com\n")

    assert [e.target for e in entries] == ["10.0.0.1", "10.0.0.2", "example.com"]
    assert [e.line_number for e in entries] == [2, 2, 3]
    assert all(e.source == "local/test" for e in entries)
    assert entries[0].metadata["separator"] == ";"
    assert entries[0].metadata["raw"] == "10.0.0.1;10.0.0.2"
    assert entries[2].metadata["separator"] is None


def test_ingestion_service_empty_text():
    ingestor = TargetIngestionService(log_level="ERROR")

    assert ingestor.ingest("empty", "") == []
    assert ingestor.ingest("comments", "# a\n# b\n") == []
