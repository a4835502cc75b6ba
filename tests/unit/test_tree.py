# tests/unit/test_tree.py

"""Tests for the in-memory suite/test tree."""

from pathlib import Path

import pytest

from prologtester.exceptions import DuplicateKeyError
from prologtester.tree import PlunitSuite, PlunitTest, SuiteKey, TestKey, TestTree, normalize_path

DOC_A = normalize_path("/work/a.pl")
DOC_B = normalize_path("/work/b.pl")


@pytest.fixture
def tree() -> TestTree:
    tree = TestTree()
    arith = tree.add_suite(SuiteKey(DOC_A, "arith"), "arith", DOC_A, 0)
    tree.add_test(arith, "add", DOC_A, 2)
    tree.add_test(arith, "sub", DOC_A, 6)
    other = tree.add_suite(SuiteKey(DOC_B, "other"), "other", DOC_B, 3)
    tree.add_test(other, "only", DOC_B, 4)
    return tree


def test_identifiers_follow_path_and_name():
    assert SuiteKey(DOC_A, "arith").id == f"suite:{DOC_A}:arith"
    assert TestKey(DOC_A, "add").id == f"test:{DOC_A}:add"


def test_normalize_path_is_absolute(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert normalize_path("x/../y.pl") == Path.cwd() / "y.pl"


class TestTestTree:
    def test_counts(self, tree: TestTree):
        assert len(tree) == 2
        assert tree.test_count == 3

    def test_roots_keep_discovery_order(self, tree: TestTree):
        assert [suite.name for _, suite in tree.iter_roots()] == ["arith", "other"]

    def test_children_keep_insertion_order(self, tree: TestTree):
        arith = tree.get(SuiteKey(DOC_A, "arith").id)
        assert isinstance(arith, PlunitSuite)
        assert [t.name for t in arith.tests()] == ["add", "sub"]
        assert all(t.suite is arith for t in arith.tests())

    def test_get_and_contains(self, tree: TestTree):
        test_id = TestKey(DOC_A, "sub").id
        item = tree.get(test_id)
        assert isinstance(item, PlunitTest)
        assert item.line == 6
        assert item.suite_name == "arith"
        assert test_id in tree
        assert tree.get("test:nowhere:x") is None

    def test_duplicate_suite_is_rejected(self, tree: TestTree):
        with pytest.raises(DuplicateKeyError):
            tree.add_suite(SuiteKey(DOC_A, "arith"), "arith", DOC_A, 20)
        assert len(tree) == 2

    def test_duplicate_test_is_rejected_across_suites_of_same_document(self, tree: TestTree):
        second = tree.add_suite(SuiteKey(DOC_A, "second"), "second", DOC_A, 12)
        with pytest.raises(DuplicateKeyError):
            tree.add_test(second, "add", DOC_A, 13)
        assert second.children == {}

    def test_explicit_key_overrides_identity(self, tree: TestTree):
        arith = tree.get(SuiteKey(DOC_A, "arith").id)
        test = tree.add_test(arith, "add", DOC_A, 9, key=TestKey(DOC_A, "add#2"))
        assert test.name == "add"
        assert test.id.endswith(":add#2")
        assert tree.test_count == 4

    def test_remove_all_for_document(self, tree: TestTree):
        removed = tree.remove_all_for_document(DOC_A)
        assert removed == 1
        assert tree.test_count == 1
        assert TestKey(DOC_A, "add").id not in tree
        assert [suite.name for _, suite in tree.iter_roots()] == ["other"]

    def test_remove_unknown_document_is_noop(self, tree: TestTree):
        assert tree.remove_all_for_document(normalize_path("/work/none.pl")) == 0
        assert len(tree) == 2

    def test_iteration_snapshot_allows_mutation(self, tree: TestTree):
        for _, suite in tree.iter_roots():
            tree.remove_all_for_document(suite.source_path)
        assert len(tree) == 0

    def test_find_by_location(self, tree: TestTree):
        assert tree.find_by_location(DOC_A, 6).name == "sub"
        containing = tree.find_by_location(DOC_A, 4)
        assert isinstance(containing, PlunitSuite)
        assert containing.name == "arith"
        assert tree.find_by_location(DOC_B, 0) is None

    def test_documents_and_clear(self, tree: TestTree):
        assert tree.documents() == {DOC_A, DOC_B}
        tree.clear()
        assert len(tree) == 0
        assert tree.test_count == 0
