from __future__ import annotations

import unittest

from issue_bot.rules import evaluate
from issue_bot.types import CreateIssue, IssueEvent, IssueTransition, NoOp, TransitionKind

CLOSED = IssueTransition(kind=TransitionKind.CLOSED)
REOPENED = IssueTransition(kind=TransitionKind.REOPENED)
LABELED = IssueTransition(kind=TransitionKind.OTHER)


def _event(title: str = "Scheduled release for June 3rd, 2021", labels=("release",)) -> IssueEvent:
    return IssueEvent(owner="test", repo="repo-test", issue_number=7, title=title, labels=frozenset(labels))


class ReleaseRuleTest(unittest.TestCase):
    def test_creates_follow_up_two_weeks_later(self) -> None:
        action = evaluate(_event(), [LABELED, CLOSED])
        self.assertIsInstance(action, CreateIssue)
        self.assertEqual(action.title, "Scheduled release for June 17th, 2021")
        self.assertIn("release", action.labels)
        self.assertIn("tsc agenda", action.labels)

    def test_body_mentions_new_date_and_resources(self) -> None:
        action = evaluate(_event(), [CLOSED])
        self.assertIn("The scheduled release on Thursday, June 17th, 2021 is assigned to:", action.body)
        self.assertIn("* (needs volunteers)", action.body)
        self.assertIn("[Release guidelines](https://", action.body)
        self.assertFalse(action.body.startswith("\n"))

    def test_missing_label_is_noop(self) -> None:
        action = evaluate(_event(labels=("bug", "tsc agenda")), [CLOSED])
        self.assertIsInstance(action, NoOp)
        self.assertEqual(action.reason, "missing-label")

    def test_reclosed_issue_is_noop_even_with_valid_title(self) -> None:
        action = evaluate(_event(), [CLOSED, REOPENED, CLOSED])
        self.assertIsInstance(action, NoOp)
        self.assertEqual(action.reason, "reclosed")

    def test_reopened_once_but_closed_once_still_applies(self) -> None:
        action = evaluate(_event(), [REOPENED, CLOSED])
        self.assertIsInstance(action, CreateIssue)

    def test_unparsable_title_is_noop(self) -> None:
        for title in ("Release June 3rd, 2021", "Scheduled release for June 3, 2021", "Scheduled release for TBD"):
            with self.subTest(title=title):
                self.assertEqual(evaluate(_event(title=title), [CLOSED]), NoOp("unparsable-title"))

    def test_nonstandard_ordinal_suffix_still_applies(self) -> None:
        action = evaluate(_event(title="Scheduled release for August 22th, 2021"), [CLOSED])
        self.assertIsInstance(action, CreateIssue)
        self.assertEqual(action.title, "Scheduled release for September 5th, 2021")

    def test_last_representable_date_is_noop(self) -> None:
        action = evaluate(_event(title="Scheduled release for December 25th, 9999"), [CLOSED])
        self.assertEqual(action, NoOp("date-out-of-range"))

    def test_empty_history_applies(self) -> None:
        self.assertIsInstance(evaluate(_event(), []), CreateIssue)

    def test_history_may_be_a_generator(self) -> None:
        action = evaluate(_event(), (t for t in [CLOSED, CLOSED]))
        self.assertEqual(action, NoOp("reclosed"))

    def test_evaluation_is_idempotent(self) -> None:
        event, history = _event(), [CLOSED]
        self.assertEqual(evaluate(event, history), evaluate(event, history))


class IssueEventFromPayloadTest(unittest.TestCase):
    def test_reads_labels_and_repository(self) -> None:
        payload = {
            "issue": {"number": 3, "title": "T", "labels": [{"name": "release"}, {"name": "tsc agenda"}]},
            "repository": {"name": "repo-test", "owner": {"login": "test"}},
        }
        event = IssueEvent.from_payload(payload)
        self.assertEqual(event.owner, "test")
        self.assertEqual(event.repo, "repo-test")
        self.assertEqual(event.issue_number, 3)
        self.assertEqual(event.labels, frozenset({"release", "tsc agenda"}))

    def test_missing_repository_raises(self) -> None:
        with self.assertRaises(ValueError):
            IssueEvent.from_payload({"issue": {"number": 1}})

    def test_transition_from_api(self) -> None:
        self.assertIs(IssueTransition.from_api({"event": "closed"}).kind, TransitionKind.CLOSED)
        self.assertIs(IssueTransition.from_api({"event": "labeled"}).kind, TransitionKind.OTHER)
        self.assertIs(IssueTransition.from_api({}).kind, TransitionKind.OTHER)


if __name__ == "__main__":
    unittest.main()
