import sys
import unittest
from pathlib import Path

# Allow importing from scripts/
ROOT = Path(__file__).resolve().parents[1]
SCRIPTS = ROOT / "scripts"
sys.path.insert(0, str(SCRIPTS))

from change_classifier import Status, classify, partition, section_offset  # noqa: E402
from structural_diff import DiffEntry, DiffKind, diff  # noqa: E402


def run(old, new, section="targets"):
    return classify(old, new, diff(old, new), section)


class TestScenarios(unittest.TestCase):
    def test_new_target_appended_is_allowed(self):
        v = run({"targets": [{"id": 1}]}, {"targets": [{"id": 1}, {"id": 2}]})
        self.assertEqual(v.status, Status.SUCCESS)
        self.assertTrue(v.ok)
        self.assertEqual(len(v.all_changes), 1)
        self.assertEqual(v.out_of_scope_changes, ())
        self.assertEqual(v.disallowed_target_changes, ())
        self.assertIn("Only new targets have been added", v.message)

    def test_field_added_to_existing_target_is_rejected(self):
        v = run({"targets": [{"id": 1}]}, {"targets": [{"id": 1, "name": "x"}]})
        self.assertEqual(v.status, Status.ERROR)
        self.assertEqual(v.message, 'Editing or adding new fields to existing "targets" is not allowed.')
        self.assertEqual([c.path for c in v.disallowed_target_changes], [("targets", 0, "name")])

    def test_change_outside_targets_is_rejected(self):
        v = run({"targets": [], "timeout": 5}, {"targets": [], "timeout": 10})
        self.assertEqual(v.status, Status.ERROR)
        self.assertEqual(v.message, 'Changes outside of "targets" or no changes detected.')
        self.assertEqual([c.path for c in v.out_of_scope_changes], [("timeout",)])

    def test_no_changes_is_rejected(self):
        doc = {"targets": [{"id": 1}]}
        v = run(doc, {"targets": [{"id": 1}]})
        self.assertEqual(v.status, Status.ERROR)
        self.assertEqual(v.all_changes, ())
        self.assertIn("no changes detected", v.message)


class TestTargetRules(unittest.TestCase):
    def test_several_appends_are_allowed(self):
        v = run({"targets": [{"id": 1}]}, {"targets": [{"id": 1}, {"id": 2}, {"id": 3}]})
        self.assertEqual(v.status, Status.SUCCESS)
        self.assertEqual(len(v.all_changes), 2)

    def test_editing_existing_target_field_is_rejected(self):
        v = run({"targets": [{"id": 1, "url": "a"}]}, {"targets": [{"id": 1, "url": "b"}]})
        self.assertEqual(v.status, Status.ERROR)
        self.assertEqual(len(v.disallowed_target_changes), 1)

    def test_numeric_string_key_is_a_field_not_an_index(self):
        v = run({"targets": {"0": {"id": 1}}}, {"targets": {"0": {"id": 1}, "1": {"id": 2}}})
        self.assertEqual(v.status, Status.ERROR)
        self.assertEqual([c.path for c in v.disallowed_target_changes], [("targets", "1")])

    def test_removing_a_target_is_rejected(self):
        v = run({"targets": [{"id": 1}, {"id": 2}]}, {"targets": [{"id": 1}]})
        self.assertEqual(v.status, Status.ERROR)
        self.assertEqual(len(v.disallowed_target_changes), 1)
        self.assertIs(v.disallowed_target_changes[0].kind, DiffKind.ARRAY)

    def test_removing_a_field_from_a_target_is_rejected(self):
        v = run({"targets": [{"id": 1, "name": "x"}]}, {"targets": [{"id": 1}]})
        self.assertEqual(v.status, Status.ERROR)
        self.assertIs(v.disallowed_target_changes[0].kind, DiffKind.DELETE)

    def test_replacing_a_scalar_target_is_rejected(self):
        v = run({"targets": ["a"]}, {"targets": ["b"]})
        self.assertEqual(v.status, Status.ERROR)
        self.assertEqual([c.path for c in v.disallowed_target_changes], [("targets", 0)])

    def test_append_to_nested_list_of_existing_target_is_rejected(self):
        v = run({"targets": [{"id": 1, "tags": ["a"]}]}, {"targets": [{"id": 1, "tags": ["a", "b"]}]})
        self.assertEqual(v.status, Status.ERROR)
        self.assertEqual(v.disallowed_target_changes[0].full_path, ("targets", 0, "tags", 1))

    def test_scope_violation_takes_precedence(self):
        v = run(
            {"targets": [{"id": 1}], "timeout": 5},
            {"targets": [{"id": 1, "name": "x"}], "timeout": 6},
        )
        self.assertIn("Changes outside", v.message)
        self.assertEqual(len(v.out_of_scope_changes), 1)
        self.assertEqual(len(v.disallowed_target_changes), 1)

    def test_custom_section(self):
        v = run({"probes": [], "targets": []}, {"probes": [{"id": 1}], "targets": []}, section="probes")
        self.assertEqual(v.status, Status.SUCCESS)
        self.assertEqual(v.section, "probes")


class TestPartition(unittest.TestCase):
    def test_section_offset_ignores_indices(self):
        self.assertEqual(section_offset(("a", "targets", 0), "targets"), 1)
        self.assertIsNone(section_offset(("a", 0), "targets"))

    def test_nested_targets_key_counts_as_in_scope(self):
        inside, outside = partition([DiffEntry(DiffKind.NEW, ("env", "targets", 3), rhs={})])
        self.assertEqual(len(inside), 1)
        self.assertEqual(outside, [])

    def test_every_change_lands_in_one_bucket(self):
        old = {"targets": [{"id": 1}], "timeout": 5, "x": 1}
        new = {"targets": [{"id": 2}, {"id": 3}], "timeout": 6}
        v = run(old, new)
        allowed = [
            c for c in v.all_changes
            if c not in v.out_of_scope_changes and c not in v.disallowed_target_changes
        ]
        self.assertEqual(
            len(allowed) + len(v.out_of_scope_changes) + len(v.disallowed_target_changes),
            len(v.all_changes),
        )
        self.assertEqual(len(allowed), 1)


if __name__ == "__main__":
    unittest.main()


def test_classification_is_idempotent() -> None:
    old = {"targets": [{"id": 1}], "timeout": 5}
    new = {"targets": [{"id": 1}, {"id": 2}], "timeout": 5}
    changes = diff(old, new)
    assert classify(old, new, changes) == classify(old, new, changes)


def test_prebuilt_append_entry_is_allowed() -> None:
    append = DiffEntry(DiffKind.ARRAY, ("targets",), index=0, item=DiffEntry(DiffKind.NEW, (), rhs={"id": 1}))
    v = classify({"targets": []}, {"targets": [{"id": 1}]}, [append])
    assert v.status is Status.SUCCESS
    assert v.all_changes == (append,)
