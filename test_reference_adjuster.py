"""
Tests for \\N reference renumbering after line inserts and deletes.
"""

from reference_adjuster import (
    adjust_references, adjust_references_for_delete, adjust_references_for_insert,
    find_deletion_point, find_insertion_point, find_references, logical_lines,
    replace_references_with_values,
)


def test_find_references():
    assert find_references("\\1 + \\12 * \\3") == [1, 12, 3]
    assert find_references("2 + 3") == []


def test_edit_points():
    assert find_insertion_point(["a", "b"], ["a", "x", "b"]) == 2
    assert find_insertion_point(["a"], ["a", "b"]) == 2
    assert find_deletion_point(["a", "x", "b"], ["a", "b"]) == 2
    assert find_deletion_point(["a", "b"], ["a"]) == 2


def test_adjust_for_insert():
    assert adjust_references_for_insert("\\2 + \\1", 2, 1) == "\\3 + \\1"
    assert adjust_references_for_insert("\\5", 1, 3) == "\\8"
    assert adjust_references_for_insert("\\2", 2, 0) == "\\2"


def test_adjust_for_delete():
    """References into the deleted block stay put"""
    assert adjust_references_for_delete("\\1 + \\3 + \\5", 2, 2) == "\\1 + \\3 + \\3"
    assert adjust_references_for_delete("\\4", 2, 1) == "\\3"
    assert adjust_references_for_delete("\\4", 2, 0) == "\\4"


def test_insert_blank_line():
    old_text = "100 = 100\n50 = 50\n\\2 + 5 = 55"
    new_text = "100 = 100\n\n50 = 50\n\\2 + 5 = 55"
    assert adjust_references(old_text, new_text) == "100 = 100\n\n50 = 50\n\\3 + 5 = 55"


def test_insert_at_top():
    old_text = "1 =\n\\1 * 2 ="
    new_text = "# header\n1 =\n\\1 * 2 ="
    assert adjust_references(old_text, new_text) == "# header\n1 =\n\\2 * 2 ="


def test_delete_line():
    old_text = "100 =\n\n50 =\n\\3 * 2 ="
    new_text = "100 =\n50 =\n\\3 * 2 ="
    assert adjust_references(old_text, new_text) == "100 =\n50 =\n\\2 * 2 ="


def test_edit_without_line_count_change():
    old_text = "1 =\n2 =\n\\2 * 2 ="
    assert adjust_references(old_text, "1 =\n3 =\n\\2 * 2 =") == "1 =\n3 =\n\\2 * 2 ="


def test_output_lines_do_not_count():
    """Multi-line results appearing or disappearing is not an insert"""
    old_text = "1 =\n2 =\n\\2 * 2 ="
    new_text = "1 = 1\n> x\n> y\n2 =\n\\2 * 2 ="
    assert adjust_references(old_text, new_text) == new_text
    assert logical_lines(new_text) == ["1 = 1", "2 =", "\\2 * 2 ="]


def test_replace_references_with_values():
    assert replace_references_with_values("\\1 + \\2", {1: "100"}) == "100 + \\2"
    assert replace_references_with_values("\\1 * 2", {1: "$50.00"}) == "$50.00 * 2"
