import unittest

from trialguard.errors import ExpiredError
from trialguard.token import SECONDS_PER_DAY, AuthorizationToken
from trialguard.validator import days_remaining, validate

T0 = 1_700_000_000


class TestTokenValidator(unittest.TestCase):

    def setUp(self):
        self.token = AuthorizationToken(subject_id="alice", issued_at=T0, expires_at=T0 + 14 * SECONDS_PER_DAY)

    def test_valid_token(self):
        now = T0 + SECONDS_PER_DAY
        self.assertIs(validate(self.token, now), self.token)
        self.assertEqual(days_remaining(self.token, now), 13)

    def test_one_second_before_expiry_is_valid(self):
        now = self.token.expires_at - 1
        validate(self.token, now)
        self.assertEqual(days_remaining(self.token, now), 0)

    def test_expired_exactly_at_expiry(self):
        with self.assertRaises(ExpiredError) as ctx:
            validate(self.token, self.token.expires_at)
        self.assertEqual(ctx.exception.days_overdue, 0)

    def test_days_overdue_is_truncated(self):
        cases = [
            (1, 0),
            (SECONDS_PER_DAY - 1, 0),
            (SECONDS_PER_DAY, 1),
            (3 * SECONDS_PER_DAY + 5, 3),
        ]
        for overdue_seconds, expected_days in cases:
            with self.subTest(overdue_seconds=overdue_seconds):
                with self.assertRaises(ExpiredError) as ctx:
                    validate(self.token, self.token.expires_at + overdue_seconds)
                self.assertEqual(ctx.exception.days_overdue, expected_days)
                self.assertEqual(ctx.exception.details, {"days_overdue": expected_days})
                self.assertIn(f"{expected_days} days ago", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()
