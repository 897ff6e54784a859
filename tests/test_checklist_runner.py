"""Tests for the self-paced checklist runner."""
import pytest

from workout_session_api.errors import InvalidIntentError
from workout_session_api.session.runners.checklist import ChecklistRunner


@pytest.fixture
def checklist(block_factory):
    return block_factory(
        type="checklist",
        name="Warm-up",
        items=[
            {"kind": "subheading", "text": "Mobility"},
            {"text": "Hip circles"},
            {"text": "Band pull-aparts", "details": ["2 x 15", "Slow"]},
            {"kind": "header", "text": "Activation"},
            {"text": "Glute bridge"},
        ],
    )


@pytest.fixture
def outcomes():
    return []


@pytest.fixture
def runner(checklist, context_factory, outcomes):
    return ChecklistRunner(checklist, context_factory(block_index=1, total_blocks=3), outcomes.append)


class TestItems:
    """Checkable items toggle; disclosures expand; labels are inert."""

    def test_toggle_check(self, runner):
        runner.handle("toggle_item", index=1)
        assert runner.checked == {1}
        runner.handle("toggle_item", index=1)
        assert runner.checked == set()

    def test_item_with_details_expands_instead_of_checking(self, runner):
        runner.handle("toggle_item", index=2)
        assert runner.checked == set()
        assert runner.expanded == {2}
        row = runner.view()["items"][2]
        assert row["disclosure"] is True
        assert row["details"] == ["2 x 15", "Slow"]
        assert "checked" not in row

    def test_collapsed_disclosure_hides_details(self, runner):
        row = runner.view()["items"][2]
        assert row["expanded"] is False
        assert row["details"] == []

    def test_labels_are_not_interactive(self, runner):
        with pytest.raises(InvalidIntentError):
            runner.handle("toggle_item", index=0)
        with pytest.raises(InvalidIntentError):
            runner.handle("toggle_item", index=3)

    def test_expand_requires_details(self, runner):
        with pytest.raises(InvalidIntentError):
            runner.handle("toggle_expand", index=1)

    def test_label_rows(self, runner):
        rows = runner.view()["items"]
        assert rows[0] == {"index": 0, "kind": "subheading", "text": "Mobility"}


class TestCompletion:
    def test_complete_without_checks(self, runner, outcomes):
        assert runner.can_complete
        runner.handle("complete")
        assert outcomes[0].skipped is False
        assert outcomes[0].payload == []

    def test_skip(self, runner, outcomes):
        runner.handle("toggle_item", index=1)
        runner.handle("skip")
        assert outcomes[0].skipped is True

    def test_outcome_reported_once(self, runner, outcomes):
        runner.complete()
        runner.complete()
        assert len(outcomes) == 1


class TestFooter:
    @pytest.mark.parametrize(
        "index, total, label",
        [(0, 3, "Start Workout ->"), (1, 3, "Complete Block ->"), (2, 3, "Finish Workout ->")],
    )
    def test_footer_label(self, checklist, context_factory, index, total, label):
        runner = ChecklistRunner(checklist, context_factory(block_index=index, total_blocks=total), lambda o: None)
        assert runner.view()["footer"] == label
