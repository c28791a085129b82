import pytest

from llmsedit import DuplicateGroup, find_duplicates, parse, parse_group_key
from llmsedit._duplicates import format_group_key


def test_scenario_group(dup_doc):
    (group,) = find_duplicates(dup_doc.sections)
    assert group.key == ("B", 2)
    assert group.member_ids == ("section-1", "section-2", "section-3")
    assert str(group) == "B (L2, 3x)"


def test_two_members_are_not_a_group(tokenizer):
    doc = parse("# X\n# X\n# Y", tokenizer)
    assert find_duplicates(doc.sections) == []
    assert [g.key for g in find_duplicates(doc.sections, min_members=2)] == [("X", 1)]


def test_levels_are_part_of_the_key(tokenizer):
    doc = parse("# Notes\n## Notes\n# Notes\n## Notes\n# Notes\n## Notes\n### Notes", tokenizer)
    groups = find_duplicates(doc.sections)
    assert [(g.key, len(g)) for g in groups] == [(("Notes", 1), 3), (("Notes", 2), 3)]


def test_groups_are_sorted_and_members_in_document_order(tokenizer):
    text = "\n".join(["## beta", "# Alpha", "## beta", "# Alpha", "## beta", "# Alpha", "## Zed"])
    groups = find_duplicates(parse(text, tokenizer).sections)
    assert [g.key for g in groups] == [("Alpha", 1), ("beta", 2)]
    assert groups[1].member_ids == ("section-0", "section-2", "section-4")


def test_title_match_is_exact(tokenizer):
    doc = parse("# Intro\n# intro\n# Intro \n# Intro", tokenizer)
    # trailing space is stripped from titles, case is not folded
    assert [g.key for g in find_duplicates(doc.sections)] == [("Intro", 1)]
    assert len(find_duplicates(doc.sections)[0]) == 3


def test_group_is_hashable_value():
    a = DuplicateGroup("T", 1, ("x", "y", "z"))
    assert a == DuplicateGroup("T", 1, ("x", "y", "z"))
    assert {a: 1}[a] == 1


@pytest.mark.parametrize(
    "text,key",
    [
        ("Examples::3", ("Examples", 3)),
        ("a::b::2", ("a::b", 2)),
        ("::1", ("", 1)),
    ],
)
def test_parse_group_key(text, key):
    assert parse_group_key(text) == key
    assert parse_group_key(format_group_key(key)) == key


@pytest.mark.parametrize("text", ["Examples", "Examples::", "Examples::x"])
def test_parse_group_key_rejects_malformed(text):
    with pytest.raises(ValueError):
        parse_group_key(text)
