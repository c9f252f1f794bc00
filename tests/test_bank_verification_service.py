import unittest
from datetime import date, datetime, timedelta, timezone
from unittest import mock
from sqlalchemy.exc import SQLAlchemyError
from core.exceptions import (
    AuthorizationError, ValidationError, QuotaError, ConfigurationError, ProviderError, PersistenceError,
)
from models.bank_account import MerchantStoreBankAccount
from models.upi_account import MerchantStoreUpiAccount
from models.verification_attempt import VerificationAttempt
from models.verification_limits import VerificationLimits
from repositories.bank_account_repository import BankAccountRepository
from repositories.upi_account_repository import UpiAccountRepository
from repositories.verification_limits_repository import VerificationLimitsRepository
from schemas.bank_schema import BankVerificationRequest, UpiVerificationRequest, ConfirmVerificationRequest
from services.attempt_governor import AttemptGovernor, DAILY_LIMIT, COOLDOWN, ACCOUNT_LIMIT
from services.bank_verification_service import BankVerificationService
from services.identity_service import MerchantIdentity
from utils.encryption import AccountNumberEncryptor
from verification_fixtures import (
    fresh_db, seed_merchant, completed, FakeValidationProvider, SOURCE_ACCOUNT, SESSION_TOKEN,
)

NOW = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)
HEX_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"


def bank_request(**overrides):
    fields = {
        "store_id": "S1",
        "account_holder_name": "Ramesh Kumar",
        "account_number": "123456789012",
        "ifsc_code": "HDFC0001234",
        "bank_name": "HDFC Bank",
    }
    fields.update(overrides)
    return BankVerificationRequest(**fields)


class VerificationServiceTestCase(unittest.TestCase):

    def setUp(self):
        self.db = fresh_db()
        self.parent, self.store = seed_merchant(self.db)
        self.identity = MerchantIdentity(merchant_parent_id=self.parent.id, session_token=SESSION_TOKEN)
        self.provider = FakeValidationProvider()
        self.sleeps = []

    def tearDown(self):
        self.db.close()

    def make_service(self, **overrides):
        options = {
            "provider": self.provider,
            "governor": AttemptGovernor(max_bank_per_day=3, max_upi_per_day=5, max_bank_accounts=3,
                                        max_upi_accounts=5, cooldown_seconds=10),
            "encryptor": AccountNumberEncryptor(""),
            "source_account_number": SOURCE_ACCOUNT,
            "confirm_delay_seconds": 2.5,
            "sleep": self.sleeps.append,
        }
        options.update(overrides)
        return BankVerificationService(self.db, **options)

    def bank_accounts(self):
        return self.db.query(MerchantStoreBankAccount).filter(
            MerchantStoreBankAccount.store_id == self.store.id).all()

    def attempts(self):
        return self.db.query(VerificationAttempt).filter(VerificationAttempt.store_id == self.store.id).all()

    def limits(self):
        self.db.expire_all()
        return VerificationLimitsRepository.get_by_store(self.db, self.store.id)

    def bank_count(self):
        limits = self.limits()
        return limits.bank_attempts_today if limits else 0


class TestBankVerification(VerificationServiceTestCase):

    def test_verified_end_to_end(self):
        self.provider.confirm_data = completed("verified", "RAMESH KUMAR")
        result = self.make_service().verify(self.identity, bank_request(), now=NOW)

        self.assertEqual(result["status"], "verified")
        self.assertEqual(result["beneficiary_name"], "RAMESH KUMAR")
        self.assertEqual(result["message"], "Account verified successfully.")

        accounts = self.bank_accounts()
        self.assertEqual(len(accounts), 1)
        account = accounts[0]
        self.assertTrue(account.is_primary)
        self.assertTrue(account.is_active)
        self.assertTrue(account.is_verified)
        self.assertEqual(account.verification_status, "verified")
        self.assertEqual(account.razorpay_validation_id, "val_1")
        self.assertEqual(account.razorpay_fund_account_id, "fa_1")
        self.assertEqual(account.razorpay_contact_id, "cont_1")
        self.assertEqual(account.account_number_masked, "********9012")
        self.assertIsNone(account.account_number_encrypted)
        self.assertEqual(account.attempt_count, 1)
        self.assertIsNotNone(account.verified_at)

        attempts = self.attempts()
        self.assertEqual(len(attempts), 1)
        self.assertEqual(attempts[0].status, "verified")
        self.assertEqual(attempts[0].attempt_type, "bank")
        self.assertEqual(attempts[0].bank_account_id, account.id)
        self.assertEqual(attempts[0].razorpay_validation_id, "val_1")
        self.assertEqual(attempts[0].attempt_metadata["reference_id"],
                         f"bank_{self.store.id}_{int(NOW.timestamp() * 1000)}")

        self.assertEqual(self.bank_count(), 1)
        self.assertEqual(self.sleeps, [2.5])
        self.assertEqual(self.provider.confirmed, ["val_1"])

    def test_first_account_for_store(self):
        self.provider.confirm_data = {
            "status": "completed",
            "results": {"account_status": "verified", "registered_name": "RAMESH KUMAR"},
        }
        request = bank_request(account_number="1234567890123", ifsc_code="ABCD0123456", bank_name="Test Bank")
        result = self.make_service().verify(self.identity, request, now=NOW)

        self.assertEqual((result["status"], result["beneficiary_name"]), ("verified", "RAMESH KUMAR"))
        accounts = self.bank_accounts()
        self.assertEqual(len(accounts), 1)
        self.assertTrue(accounts[0].is_verified)
        self.assertEqual(accounts[0].bank_name, "Test Bank")
        self.assertEqual(len(self.attempts()), 1)
        self.assertEqual(self.bank_count(), 1)
        self.assertEqual(self.provider.submitted[0]["account_number"], "1234567890123")

    def test_submit_carries_store_contact(self):
        self.make_service().verify(self.identity, bank_request(), now=NOW)
        submitted = self.provider.submitted[0]
        self.assertEqual(submitted["source_account_number"], SOURCE_ACCOUNT)
        self.assertEqual(submitted["contact_email"], "s1@example.com")
        self.assertEqual(submitted["contact_phone"], "919876543210")
        self.assertEqual(submitted["ifsc"], "HDFC0001234")

    def test_repeat_requests_reuse_primary_slot(self):
        service = self.make_service()
        for i in range(3):
            service.verify(self.identity, bank_request(account_number=f"12345678901{i}"),
                           now=NOW + timedelta(seconds=30 * i))

        accounts = self.bank_accounts()
        self.assertEqual(len(accounts), 1)
        self.assertEqual(accounts[0].attempt_count, 3)
        self.assertEqual(accounts[0].account_number, "123456789012")
        self.assertEqual(accounts[0].razorpay_validation_id, "val_3")
        self.assertEqual(len(self.attempts()), 3)
        self.assertEqual(self.bank_count(), 3)

    def test_failed_result(self):
        self.provider.confirm_data = completed("invalid", None)
        result = self.make_service().verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(result["status"], "failed")
        self.assertEqual(result["message"], "Verification failed. Check account details and try again.")
        account = self.bank_accounts()[0]
        self.assertFalse(account.is_verified)
        self.assertEqual(account.verification_status, "failed")
        # a failed outcome still counts against the quota
        self.assertEqual(self.bank_count(), 1)

    def test_verified_is_not_sticky(self):
        service = self.make_service()
        service.verify(self.identity, bank_request(), now=NOW)
        self.provider.confirm_data = completed("invalid", None)
        service.verify(self.identity, bank_request(), now=NOW + timedelta(minutes=1))

        account = self.bank_accounts()[0]
        self.assertFalse(account.is_verified)
        self.assertEqual(account.verification_status, "failed")
        self.assertIsNone(account.verified_at)

    def test_confirm_failure_leaves_processing(self):
        self.provider.confirm_error = "timeout"
        result = self.make_service().verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(result["status"], "processing")
        self.assertEqual(result["message"], "Validation in progress. Refresh in a moment.")
        account = self.bank_accounts()[0]
        self.assertFalse(account.is_verified)
        self.assertEqual(account.verification_status, "processing")
        self.assertEqual(self.bank_count(), 1)

    def test_confirm_retries_are_bounded(self):
        self.provider.confirm_error = "timeout"
        self.make_service(confirm_attempts=3, confirm_delay_seconds=1).verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(self.provider.confirmed, ["val_1"] * 3)
        self.assertEqual(self.sleeps, [1, 1, 1])

    def test_encrypted_account_number(self):
        encryptor = AccountNumberEncryptor(HEX_KEY)
        self.make_service(encryptor=encryptor).verify(self.identity, bank_request(), now=NOW)
        account = self.bank_accounts()[0]
        self.assertEqual(account.account_number, "********9012")
        self.assertEqual(encryptor.decrypt(account.account_number_encrypted), "123456789012")

    def test_explicit_account_id_updates_that_row(self):
        other = MerchantStoreBankAccount(
            store_id=self.store.id, account_holder_name="Ramesh Kumar", account_number="55556666",
            ifsc_code="SBIN0001111", bank_name="State Bank of India", is_primary=False, is_active=True,
        )
        self.db.add(other)
        self.db.commit()

        self.make_service().verify(self.identity, bank_request(bank_account_id=other.id), now=NOW)
        accounts = self.bank_accounts()
        self.assertEqual(len(accounts), 1)
        self.assertEqual(accounts[0].id, other.id)
        self.assertFalse(accounts[0].is_primary)
        self.assertEqual(accounts[0].verification_status, "verified")


class TestRequestRejections(VerificationServiceTestCase):

    def assert_nothing_recorded(self):
        self.assertEqual(self.bank_accounts(), [])
        self.assertEqual(self.attempts(), [])
        self.assertEqual(self.bank_count(), 0)

    def test_missing_fields_listed_together(self):
        request = BankVerificationRequest(store_id="S1", account_holder_name="Ramesh Kumar", bank_name="HDFC Bank")
        with self.assertRaises(ValidationError) as ctx:
            self.make_service().verify(self.identity, request, now=NOW)
        self.assertEqual(ctx.exception.fields, ["account_number", "ifsc_code"])
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(self.provider.submitted, [])
        self.assert_nothing_recorded()

    def test_name_mismatch(self):
        with self.assertRaises(ValidationError) as ctx:
            self.make_service().verify(self.identity, bank_request(account_holder_name="Suresh Rao"), now=NOW)
        self.assertEqual(ctx.exception.kind, "name_mismatch")
        self.assertEqual(self.provider.submitted, [])
        self.assert_nothing_recorded()

    def test_foreign_store(self):
        seed_merchant(self.db, store_code="S2", owner="Suresh Rao", token="tok_other")
        with self.assertRaises(AuthorizationError) as ctx:
            self.make_service().verify(self.identity, bank_request(store_id="S2"), now=NOW)
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(self.provider.submitted, [])

    def test_unknown_account_id(self):
        with self.assertRaises(AuthorizationError):
            self.make_service().verify(self.identity, bank_request(bank_account_id=999), now=NOW)

    def test_cooldown(self):
        service = self.make_service()
        service.verify(self.identity, bank_request(), now=NOW)
        with self.assertRaises(QuotaError) as ctx:
            service.verify(self.identity, bank_request(), now=NOW + timedelta(seconds=5))
        self.assertEqual(ctx.exception.reason, COOLDOWN)
        self.assertEqual(ctx.exception.retry_after_seconds, 5)
        self.assertEqual(len(self.provider.submitted), 1)
        self.assertEqual(self.bank_count(), 1)

    def test_daily_limit(self):
        service = self.make_service()
        for i in range(3):
            service.verify(self.identity, bank_request(), now=NOW + timedelta(minutes=i))
        with self.assertRaises(QuotaError) as ctx:
            service.verify(self.identity, bank_request(), now=NOW + timedelta(minutes=5))
        self.assertEqual(ctx.exception.reason, DAILY_LIMIT)
        self.assertIsNone(ctx.exception.retry_after_seconds)
        self.assertEqual(len(self.provider.submitted), 3)
        self.assertEqual(self.bank_count(), 3)

    def test_next_day_resets_counter(self):
        self.db.add(VerificationLimits(store_id=self.store.id, bank_attempts_today=3,
                                       upi_attempts_today=0, last_reset_date=date(2026, 3, 1)))
        self.db.commit()
        self.make_service().verify(self.identity, bank_request(), now=NOW)
        limits = self.limits()
        self.assertEqual(limits.bank_attempts_today, 1)
        self.assertEqual(limits.last_reset_date, NOW.date())

    def test_account_ceiling_on_new_row(self):
        for i in range(3):
            self.db.add(MerchantStoreBankAccount(
                store_id=self.store.id, account_holder_name="Ramesh Kumar", account_number=f"5555666{i}",
                ifsc_code="SBIN0001111", bank_name="State Bank of India", is_primary=False, is_active=True,
            ))
        self.db.commit()
        with self.assertRaises(QuotaError) as ctx:
            self.make_service().verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(ctx.exception.reason, ACCOUNT_LIMIT)
        self.assertEqual(self.provider.submitted, [])

    def test_missing_source_account(self):
        with self.assertRaises(ConfigurationError) as ctx:
            self.make_service(source_account_number="").verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertNotIn("RAZORPAY", ctx.exception.message)
        self.assertEqual(self.provider.submitted, [])
        self.assert_nothing_recorded()

    def test_provider_without_credentials(self):
        self.provider.configured = False
        with self.assertRaises(ConfigurationError):
            self.make_service().verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(self.provider.submitted, [])

    def test_submit_rejected(self):
        self.provider.submit_error = "Invalid IFSC"
        with self.assertRaises(ProviderError) as ctx:
            self.make_service().verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(self.provider.confirmed, [])
        self.assert_nothing_recorded()

    def test_submit_unreachable(self):
        self.provider.submit_error = "Validation service unreachable"
        self.provider.unreachable = True
        with self.assertRaises(ProviderError) as ctx:
            self.make_service().verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(ctx.exception.status_code, 502)
        self.assert_nothing_recorded()


class TestPersistenceFailures(VerificationServiceTestCase):

    def test_account_save_failure(self):
        with mock.patch("services.bank_verification_service.BankAccountRepository.save",
                        side_effect=SQLAlchemyError("disk full")):
            with self.assertRaises(PersistenceError) as ctx:
                self.make_service().verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(self.bank_accounts(), [])

        # the provider was reached, so the attempt is still counted and audited
        self.assertEqual(self.bank_count(), 1)
        attempts = self.attempts()
        self.assertEqual(len(attempts), 1)
        self.assertIsNone(attempts[0].bank_account_id)
        self.assertEqual(attempts[0].razorpay_validation_id, "val_1")
        self.assertFalse(attempts[0].attempt_metadata["account_saved"])

    def test_upi_save_failure_still_counts(self):
        with mock.patch("services.bank_verification_service.UpiAccountRepository.save",
                        side_effect=SQLAlchemyError("disk full")):
            with self.assertRaises(PersistenceError):
                self.make_service().verify(self.identity, UpiVerificationRequest(store_id="S1", upi_id="ramesh@okaxis"),
                                           now=NOW)
        self.assertEqual(self.limits().upi_attempts_today, 1)
        attempts = self.attempts()
        self.assertEqual(len(attempts), 1)
        self.assertIsNone(attempts[0].upi_account_id)

    def test_repeated_save_failures_exhaust_quota(self):
        service = self.make_service()
        with mock.patch("services.bank_verification_service.BankAccountRepository.save",
                        side_effect=SQLAlchemyError("disk full")):
            for i in range(3):
                with self.assertRaises(PersistenceError):
                    service.verify(self.identity, bank_request(), now=NOW + timedelta(minutes=i))
            with self.assertRaises(QuotaError):
                service.verify(self.identity, bank_request(), now=NOW + timedelta(minutes=5))
        self.assertEqual(len(self.provider.submitted), 3)

    def test_audit_failure_does_not_fail_request(self):
        with mock.patch("services.bank_verification_service.VerificationAttemptRepository.create_attempt_log",
                        side_effect=SQLAlchemyError("audit table locked")):
            result = self.make_service().verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(result["status"], "verified")
        self.assertEqual(self.attempts(), [])
        self.assertTrue(self.bank_accounts()[0].is_verified)
        self.assertEqual(self.bank_count(), 1)

    def test_counter_failure_does_not_fail_request(self):
        with mock.patch("services.bank_verification_service.AttemptGovernor.record_attempt",
                        side_effect=SQLAlchemyError("deadlock")):
            result = self.make_service().verify(self.identity, bank_request(), now=NOW)
        self.assertEqual(result["status"], "verified")
        self.assertEqual(len(self.attempts()), 1)


class TestConcurrentSlotClaims(VerificationServiceTestCase):
    """A request that saw no row, while another request inserted it, reuses that row."""

    def first_lookup_misses(self, lookup):
        calls = []

        def stale_then_real(*args, **kwargs):
            calls.append(args)
            return None if len(calls) == 1 else lookup(*args, **kwargs)
        return stale_then_real

    def test_primary_slot_taken_between_lookup_and_insert(self):
        self.db.add(MerchantStoreBankAccount(
            store_id=self.store.id, account_holder_name="Ramesh Kumar", account_number="123456789012",
            ifsc_code="HDFC0001234", bank_name="HDFC Bank", is_primary=True, is_active=True,
            attempt_count=1, last_attempt_at=NOW - timedelta(minutes=5),
        ))
        self.db.commit()

        stale = self.first_lookup_misses(BankAccountRepository.get_primary)
        with mock.patch.object(BankAccountRepository, "get_primary", side_effect=stale):
            result = self.make_service().verify(self.identity, bank_request(), now=NOW)

        self.assertEqual(result["status"], "verified")
        accounts = self.bank_accounts()
        self.assertEqual(len(accounts), 1)
        self.assertEqual(accounts[0].attempt_count, 2)
        self.assertEqual(accounts[0].razorpay_validation_id, "val_1")
        self.assertEqual(self.attempts()[0].bank_account_id, accounts[0].id)

    def test_upi_handle_taken_between_lookup_and_insert(self):
        self.db.add(MerchantStoreUpiAccount(
            store_id=self.store.id, upi_id="ramesh@okaxis", is_active=True, attempt_count=1,
            last_attempt_at=NOW - timedelta(minutes=5),
        ))
        self.db.commit()

        stale = self.first_lookup_misses(UpiAccountRepository.get_by_upi_id)
        with mock.patch.object(UpiAccountRepository, "get_by_upi_id", side_effect=stale):
            result = self.make_service().verify(
                self.identity, UpiVerificationRequest(store_id="S1", upi_id="ramesh@okaxis"), now=NOW)

        self.assertEqual(result["status"], "verified")
        accounts = self.db.query(MerchantStoreUpiAccount).filter(
            MerchantStoreUpiAccount.store_id == self.store.id).all()
        self.assertEqual(len(accounts), 1)
        self.assertEqual(accounts[0].attempt_count, 2)
        self.assertEqual(self.limits().upi_attempts_today, 1)


class TestUpiVerification(VerificationServiceTestCase):

    def upi_accounts(self):
        return self.db.query(MerchantStoreUpiAccount).filter(
            MerchantStoreUpiAccount.store_id == self.store.id).all()

    def test_upi_verified_and_reused(self):
        self.provider.confirm_data = completed("active", "RAMESH KUMAR")
        service = self.make_service()
        service.verify(self.identity, UpiVerificationRequest(store_id="S1", upi_id="Ramesh@OKAXIS"), now=NOW)
        result = service.verify(self.identity, UpiVerificationRequest(store_id="S1", upi_id="ramesh@okaxis"),
                                now=NOW + timedelta(minutes=1))

        self.assertEqual(result["status"], "verified")
        accounts = self.upi_accounts()
        self.assertEqual(len(accounts), 1)
        self.assertEqual(accounts[0].upi_id, "ramesh@okaxis")
        self.assertEqual(accounts[0].attempt_count, 2)
        self.assertTrue(accounts[0].is_verified)

        limits = self.limits()
        self.assertEqual((limits.bank_attempts_today, limits.upi_attempts_today), (0, 2))
        self.assertEqual(self.provider.submitted[0]["vpa"], "ramesh@okaxis")
        self.assertEqual(self.attempts()[0].upi_account_id, accounts[0].id)

    def test_upi_format(self):
        with self.assertRaises(ValidationError) as ctx:
            self.make_service().verify(self.identity, UpiVerificationRequest(store_id="S1", upi_id="ramesh"), now=NOW)
        self.assertEqual(ctx.exception.fields, ["upi_id"])

    def test_upi_missing(self):
        with self.assertRaises(ValidationError) as ctx:
            self.make_service().verify(self.identity, UpiVerificationRequest(store_id="S1"), now=NOW)
        self.assertEqual(ctx.exception.fields, ["upi_id"])

    def test_upi_holder_name_checked_when_given(self):
        with self.assertRaises(ValidationError) as ctx:
            self.make_service().verify(
                self.identity,
                UpiVerificationRequest(store_id="S1", upi_id="suresh@ybl", holder_name="Suresh Rao"),
                now=NOW,
            )
        self.assertEqual(ctx.exception.kind, "name_mismatch")

    def test_upi_cooldown_is_per_handle(self):
        service = self.make_service()
        service.verify(self.identity, UpiVerificationRequest(store_id="S1", upi_id="ramesh@okaxis"), now=NOW)
        with self.assertRaises(QuotaError):
            service.verify(self.identity, UpiVerificationRequest(store_id="S1", upi_id="ramesh@okaxis"),
                           now=NOW + timedelta(seconds=2))
        service.verify(self.identity, UpiVerificationRequest(store_id="S1", upi_id="ramesh@ybl"),
                       now=NOW + timedelta(seconds=2))
        self.assertEqual(len(self.upi_accounts()), 2)


class TestConfirmAndStatus(VerificationServiceTestCase):

    def test_confirm_resolves_processing(self):
        self.provider.confirm_error = "timeout"
        service = self.make_service()
        service.verify(self.identity, bank_request(), now=NOW)

        self.provider.confirm_error = None
        self.provider.confirm_data = completed("verified", "RAMESH KUMAR")
        result = service.confirm_pending(self.identity, ConfirmVerificationRequest(store_id="S1"),
                                         now=NOW + timedelta(minutes=1))
        self.assertEqual(result["status"], "verified")
        self.assertTrue(self.bank_accounts()[0].is_verified)
        # resolving a pending validation is not a new attempt
        self.assertEqual(self.bank_count(), 1)
        self.assertEqual(len(self.attempts()), 1)

    def test_confirm_on_terminal_is_noop(self):
        service = self.make_service()
        service.verify(self.identity, bank_request(), now=NOW)
        calls = len(self.provider.confirmed)

        result = service.confirm_pending(self.identity, ConfirmVerificationRequest(store_id="S1"))
        self.assertEqual(result["status"], "verified")
        self.assertEqual(len(self.provider.confirmed), calls)

    def test_confirm_still_pending(self):
        self.provider.confirm_data = {"id": "val_1", "status": "created"}
        service = self.make_service()
        service.verify(self.identity, bank_request(), now=NOW)
        result = service.confirm_pending(self.identity, ConfirmVerificationRequest(store_id="S1"))
        self.assertEqual(result["status"], "processing")
        self.assertEqual(self.bank_accounts()[0].verification_status, "processing")

    def test_confirm_without_record(self):
        with self.assertRaises(ValidationError):
            self.make_service().confirm_pending(self.identity, ConfirmVerificationRequest(store_id="S1"))

    def test_status(self):
        service = self.make_service()
        status = service.get_status(self.identity, "S1", now=NOW)
        self.assertFalse(status["verified"])
        self.assertEqual(status["verification_status"], "pending")
        self.assertTrue(status["can_try_verify"])
        self.assertIsNone(status["upi_verification_status"])

        service.verify(self.identity, bank_request(), now=NOW)
        status = service.get_status(self.identity, "S1", now=NOW)
        self.assertTrue(status["verified"])
        self.assertFalse(status["can_edit"])
        self.assertEqual(status["bank_attempts_today"], 1)
        self.assertEqual(status["max_bank_attempts_per_day"], 3)

        # yesterday's counters read as zero
        status = service.get_status(self.identity, "S1", now=NOW + timedelta(days=1))
        self.assertEqual(status["bank_attempts_today"], 0)


if __name__ == "__main__":
    unittest.main()
