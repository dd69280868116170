import threading
import unittest

from trialguard import crypto
from trialguard.errors import AuthorityUnavailableError
from trialguard.token import SECONDS_PER_DAY, decode

from license_server.core.database import create_db_and_tables, make_engine
from license_server.trial.service import KeyAuthority
from license_server.trial.store import MemoryRevocationStore, SQLRevocationStore

T0 = 1_700_000_000


class RecordingSink:
    def __init__(self):
        self.events = []

    def emit(self, event, **fields):
        self.events.append((event, fields))


class TestKeyAuthority(unittest.TestCase):

    def setUp(self):
        self.now = T0
        self.sink = RecordingSink()
        self.authority = KeyAuthority(
            crypto.generate_signing_key(),
            clock=lambda: self.now,
            events=self.sink,
        )

    def test_issue_signs_canonical_token(self):
        grant = self.authority.issue("alice")
        token = decode(grant.token_bytes)

        self.assertEqual(token.subject_id, "alice")
        self.assertEqual(token.issued_at, T0)
        self.assertEqual(token.expires_at, T0 + 14 * SECONDS_PER_DAY)
        self.assertTrue(crypto.verify(grant.token_bytes, grant.signature, self.authority.public_key()))
        self.assertEqual(len(grant.signature_hex), 128)
        self.assertEqual(self.sink.events[-1][0], "grant.issued")

    def test_repeated_issue_gives_later_grants(self):
        first = decode(self.authority.issue("alice").token_bytes)
        self.now += 60
        second = decode(self.authority.issue("alice").token_bytes)
        self.assertGreater(second.expires_at, first.expires_at)

    def test_issue_rejects_empty_subject(self):
        with self.assertRaises(ValueError):
            self.authority.issue("")

    def test_custom_duration(self):
        authority = KeyAuthority(crypto.generate_signing_key(), duration_days=30, clock=lambda: T0, events=self.sink)
        token = decode(authority.issue("dave").token_bytes)
        self.assertEqual(token.expires_at - token.issued_at, 30 * SECONDS_PER_DAY)
        with self.assertRaises(ValueError):
            KeyAuthority(crypto.generate_signing_key(), duration_days=0)

    def test_revocation_lifecycle(self):
        self.assertFalse(self.authority.is_revoked("bob"))
        self.authority.revoke("bob")
        self.authority.revoke("bob")
        self.assertTrue(self.authority.is_revoked("bob"))
        self.assertFalse(self.authority.is_revoked("alice"))
        self.authority.unrevoke("bob")
        self.assertFalse(self.authority.is_revoked("bob"))
        self.assertEqual(
            [event for event, _ in self.sink.events],
            ["subject.revoked", "subject.revoked", "subject.unrevoked"],
        )

    def test_public_key_matches_signing_key(self):
        signing_key = crypto.generate_signing_key()
        authority = KeyAuthority(signing_key, events=self.sink)
        self.assertEqual(authority.public_key(), crypto.public_key_bytes(signing_key))
        self.assertEqual(len(authority.public_key()), 32)


class TestMemoryRevocationStore(unittest.TestCase):

    def test_concurrent_revocations_visible(self):
        store = MemoryRevocationStore()
        subjects = [f"user-{i}" for i in range(50)]

        threads = [threading.Thread(target=store.set_revoked, args=(s, True)) for s in subjects]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertTrue(all(store.is_revoked(s) for s in subjects))
        self.assertFalse(store.is_revoked("someone-else"))


class TestSQLRevocationStore(unittest.TestCase):

    def setUp(self):
        self.engine = make_engine("sqlite://")
        create_db_and_tables(self.engine)
        self.store = SQLRevocationStore(self.engine)

    def test_defaults_to_not_revoked(self):
        self.assertFalse(self.store.is_revoked("alice"))

    def test_revoke_and_unrevoke(self):
        self.store.set_revoked("bob", True)
        self.assertTrue(self.store.is_revoked("bob"))
        self.store.set_revoked("bob", False)
        self.assertFalse(self.store.is_revoked("bob"))

    def test_authority_on_sql_store(self):
        authority = KeyAuthority(crypto.generate_signing_key(), store=self.store, events=RecordingSink())
        authority.revoke("carol")
        self.assertTrue(authority.is_revoked("carol"))

    def test_missing_table_is_unavailable(self):
        store = SQLRevocationStore(make_engine("sqlite://"))
        with self.assertRaises(AuthorityUnavailableError):
            store.is_revoked("alice")
        with self.assertRaises(AuthorityUnavailableError):
            store.set_revoked("alice", True)


if __name__ == "__main__":
    unittest.main()
