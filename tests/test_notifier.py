"""Tests for assignment emails."""

from datetime import UTC, datetime

import pytest

from secret_santa.assignment.generator import generate_assignments
from secret_santa.core.config import settings
from secret_santa.errors import NotifierNotConfiguredError
from secret_santa.notifications.mailer import SendGridMailer
from secret_santa.notifications.notifier import NO_WISHES, notify_participants, render_assignment


class TestRenderAssignment:
    """Tests for the email body."""

    def test_contains_recipient_and_wishes(self, make_roster):
        giver, recipient = make_roster("Alice", "Bob")
        recipient.wishlist = "A red scarf"

        text, html = render_assignment(giver, recipient)

        assert "Hi Alice" in text
        assert "Bob" in text
        assert "A red scarf" in text
        assert "Bob" in html
        assert "A red scarf" in html

    def test_blank_wishes_placeholder(self, make_roster):
        giver, recipient = make_roster("Alice", "Bob")
        recipient.wishlist = "   "

        text, html = render_assignment(giver, recipient)
        assert NO_WISHES in text
        assert NO_WISHES in html

    def test_html_is_escaped(self, make_roster):
        giver, recipient = make_roster("Alice", "Bob")
        recipient.wishlist = "<script>alert(1)</script>"

        text, html = render_assignment(giver, recipient)
        assert "<script>" not in html
        assert "<script>" in text

    def test_budget_line(self, make_roster, monkeypatch):
        giver, recipient = make_roster("Alice", "Bob")

        text, _ = render_assignment(giver, recipient)
        assert "Budget" not in text

        monkeypatch.setattr(settings, "gift_budget", "20-50 EUR")
        text, html = render_assignment(giver, recipient)
        assert "Budget: 20-50 EUR" in text
        assert "20-50 EUR" in html


class TestNotifyParticipants:
    """Tests for the notification batch."""

    def test_everyone_notified_once(self, make_roster, mailer):
        roster = generate_assignments(make_roster("Alice", "Bob", "Carol"))
        report = notify_participants(roster, mailer)

        assert report.success
        assert report.message == "Emails sent: 3 of 3"
        assert sorted(m["to"] for m in mailer.sent) == [
            "alice@example.com",
            "bob@example.com",
            "carol@example.com",
        ]

    def test_message_names_assigned_recipient(self, make_roster, mailer):
        roster = generate_assignments(make_roster("Alice", "Bob"))
        notify_participants(roster, mailer)

        by_address = {m["to"]: m["text"] for m in mailer.sent}
        assert "You are giving a gift to: Bob" in by_address["alice@example.com"]
        assert "You are giving a gift to: Alice" in by_address["bob@example.com"]

    def test_one_failure_out_of_three(self, make_roster, mailer):
        roster = generate_assignments(make_roster("Alice", "Bob", "Carol"))
        mailer.fail_for.add("bob@example.com")

        report = notify_participants(roster, mailer)

        assert not report.success
        assert sorted(report.sent) == ["Alice", "Carol"]
        assert len(report.failed) == 1
        assert report.failed[0].name == "Bob"
        assert "unavailable" in report.failed[0].error
        assert report.message == "Emails sent: 2 of 3"
        # No retry of the failed delivery within the call
        assert len(mailer.sent) == 2

    def test_unassigned_skipped(self, make_roster, mailer):
        roster = make_roster("Alice", "Bob")
        report = notify_participants(roster, mailer)

        assert report.sent == []
        assert report.skipped == ["Alice", "Bob"]
        assert mailer.sent == []

    def test_already_notified_skipped_unless_resend(self, make_roster, mailer):
        roster = generate_assignments(make_roster("Alice", "Bob", "Carol"))
        roster[0].notified_at = datetime.now(UTC)

        report = notify_participants(roster, mailer)
        assert report.skipped == ["Alice"]
        assert len(mailer.sent) == 2

        report = notify_participants(roster, mailer, resend=True)
        assert report.skipped == []
        assert len(mailer.sent) == 5

    def test_unknown_recipient_is_a_failure(self, make_roster, mailer):
        alice, bob = generate_assignments(make_roster("Alice", "Bob"))

        report = notify_participants([alice], mailer)
        assert report.failed[0].name == "Alice"
        assert mailer.sent == []

    def test_duplicate_entries_notified_once(self, make_roster, mailer):
        roster = generate_assignments(make_roster("Alice", "Bob"))
        report = notify_participants(roster + roster, mailer)

        assert len(mailer.sent) == 2
        assert report.total == 2

    def test_sent_ids_reported(self, make_roster, mailer):
        roster = generate_assignments(make_roster("Alice", "Bob"))
        report = notify_participants(roster, mailer)
        assert report.sent_ids == [p.id for p in roster]

    def test_on_sent_called_per_delivery(self, make_roster, mailer):
        roster = generate_assignments(make_roster("Alice", "Bob", "Carol"))
        mailer.fail_for.add("bob@example.com")
        delivered = []

        notify_participants(roster, mailer, on_sent=delivered.append)
        assert delivered == [roster[0].id, roster[2].id]

    def test_deliveries_recorded_when_batch_is_cut_short(self, make_roster):
        """A worker killed mid-batch keeps the record of what already went out."""

        class Shutdown(BaseException):
            pass

        class DyingMailer:
            def __init__(self):
                self.calls = 0

            def send(self, to_email, subject, text, html):
                self.calls += 1
                if self.calls == 3:
                    raise Shutdown()

        roster = generate_assignments(make_roster("Alice", "Bob", "Carol", "Dave"))
        delivered = []

        with pytest.raises(Shutdown):
            notify_participants(roster, DyingMailer(), on_sent=delivered.append)
        assert delivered == [roster[0].id, roster[1].id]


class TestSendGridMailer:
    """Tests for the SendGrid transport configuration."""

    @pytest.mark.parametrize(
        "api_key,from_email",
        [("", "santa@example.com"), ("SG.key", ""), ("", "")],
    )
    def test_missing_configuration(self, api_key, from_email):
        with pytest.raises(NotifierNotConfiguredError):
            SendGridMailer(api_key, from_email)

    def test_configured(self):
        mailer = SendGridMailer("SG.key", "santa@example.com")
        assert mailer.from_email == "santa@example.com"
