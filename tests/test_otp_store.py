"""
OTP store and issuer tests
"""
import threading
from datetime import timedelta

import pytest

from school_records.controllers.otp_controller import request_code, validate_and_consume
from school_records.core.exceptions import DeliveryFailed, InvalidOrExpiredOTP
from school_records.core.otp_store import OTP_LENGTH, InMemoryOtpStore, generate_otp


class TestGenerateOtp:
    def test_six_digits(self):
        for _ in range(200):
            code = generate_otp()
            assert len(code) == OTP_LENGTH
            assert code.isdigit()

    def test_keeps_leading_zeros(self):
        # zero is a valid first digit
        first_digits = {generate_otp()[0] for _ in range(500)}
        assert "0" in first_digits


class TestInMemoryOtpStore:
    def test_consume_succeeds_once(self, otp_store: InMemoryOtpStore):
        otp_store.put("a@x.com", "123456", timedelta(minutes=10))

        assert otp_store.consume("a@x.com", "123456") is True
        assert otp_store.consume("a@x.com", "123456") is False
        assert otp_store.get("a@x.com") is None

    def test_wrong_code_does_not_consume(self, otp_store: InMemoryOtpStore):
        otp_store.put("a@x.com", "123456", timedelta(minutes=10))

        assert otp_store.consume("a@x.com", "654321") is False
        assert otp_store.consume("a@x.com", "123456") is True

    def test_unknown_email(self, otp_store: InMemoryOtpStore):
        assert otp_store.consume("nobody@x.com", "123456") is False

    def test_expired_code_rejected(self, otp_store: InMemoryOtpStore, clock):
        otp_store.put("a@x.com", "123456", timedelta(minutes=10))
        clock.advance(minutes=10)

        assert otp_store.consume("a@x.com", "123456") is False
        # not purged, just unusable
        assert otp_store.get("a@x.com") is not None

    def test_valid_just_before_expiry(self, otp_store: InMemoryOtpStore, clock):
        otp_store.put("a@x.com", "123456", timedelta(minutes=10))
        clock.advance(minutes=9, seconds=59)

        assert otp_store.consume("a@x.com", "123456") is True

    def test_new_request_overwrites(self, otp_store: InMemoryOtpStore):
        otp_store.put("a@x.com", "111111", timedelta(minutes=10))
        otp_store.put("a@x.com", "222222", timedelta(minutes=10))

        assert len(otp_store) == 1
        assert otp_store.consume("a@x.com", "111111") is False
        assert otp_store.consume("a@x.com", "222222") is True

    def test_overwrite_resets_expiry(self, otp_store: InMemoryOtpStore, clock):
        otp_store.put("a@x.com", "111111", timedelta(minutes=10))
        clock.advance(minutes=8)
        otp_store.put("a@x.com", "222222", timedelta(minutes=10))
        clock.advance(minutes=8)

        assert otp_store.consume("a@x.com", "222222") is True

    def test_discard_only_removes_same_passcode(self, otp_store: InMemoryOtpStore):
        old = otp_store.put("a@x.com", "111111", timedelta(minutes=10))
        otp_store.put("a@x.com", "222222", timedelta(minutes=10))

        otp_store.discard(old)

        assert otp_store.consume("a@x.com", "222222") is True

    def test_concurrent_consume_single_winner(self, otp_store: InMemoryOtpStore):
        otp_store.put("a@x.com", "123456", timedelta(minutes=10))
        results: list[bool] = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(otp_store.consume("a@x.com", "123456"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1


class TestOtpIssuer:
    async def test_request_code_stores_and_mails(self, otp_store, mailer):
        passcode = await request_code(otp_store, mailer, "A@X.com")

        assert passcode.email == "a@x.com"
        assert mailer.sent[-1]["to"] == "a@x.com"
        assert mailer.last_code_for("a@x.com") == passcode.code
        assert "10 minutes" in mailer.sent[-1]["text"]

    async def test_default_window_is_ten_minutes(self, otp_store, mailer, clock):
        passcode = await request_code(otp_store, mailer, "a@x.com")

        assert passcode.expires_at - clock.now == timedelta(minutes=10)

    async def test_custom_window(self, otp_store, mailer, clock):
        passcode = await request_code(otp_store, mailer, "a@x.com", expire_minutes=100)

        assert passcode.expires_at - clock.now == timedelta(minutes=100)

    async def test_delivery_failure_discards_code(self, otp_store, mailer):
        mailer.fail = True

        with pytest.raises(DeliveryFailed):
            await request_code(otp_store, mailer, "a@x.com")

        assert otp_store.get("a@x.com") is None

    async def test_validate_and_consume(self, otp_store, mailer):
        passcode = await request_code(otp_store, mailer, "a@x.com")

        validate_and_consume(otp_store, "a@x.com", passcode.code)
        with pytest.raises(InvalidOrExpiredOTP):
            validate_and_consume(otp_store, "a@x.com", passcode.code)

    async def test_zero_window_is_not_replaced_by_default(self, otp_store, mailer, clock):
        passcode = await request_code(otp_store, mailer, "a@x.com", expire_minutes=0)

        assert passcode.expires_at == clock.now
        with pytest.raises(InvalidOrExpiredOTP):
            validate_and_consume(otp_store, "a@x.com", passcode.code)
