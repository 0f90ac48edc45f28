from services.otp_ledger import OTP_EXP_SECONDS


def test_issue_returns_six_digit_code(otp_ledger):
    for _ in range(50):
        otp = otp_ledger.issue("al@x.com")
        assert len(otp) == 6 and otp.isdigit()
        assert 100000 <= int(otp) <= 999999


def test_issue_then_verify(otp_ledger):
    otp = otp_ledger.issue("al@x.com")
    assert otp_ledger.verify("al@x.com", otp) is True


def test_verify_is_idempotent(otp_ledger):
    otp = otp_ledger.issue("al@x.com")
    assert otp_ledger.verify("al@x.com", otp) is True
    assert otp_ledger.verify("al@x.com", otp) is True
    assert "al@x.com" in otp_ledger.store


def test_wrong_code_or_unknown_email(otp_ledger):
    otp = otp_ledger.issue("al@x.com")
    wrong = "100000" if otp != "100000" else "100001"
    assert otp_ledger.verify("al@x.com", wrong) is False
    assert otp_ledger.verify("bo@x.com", otp) is False


def test_code_expires_after_five_minutes(otp_ledger, clock):
    assert OTP_EXP_SECONDS == 300
    otp = otp_ledger.issue("al@x.com")
    clock.advance(299)
    assert otp_ledger.verify("al@x.com", otp) is True
    clock.advance(1)
    assert otp_ledger.verify("al@x.com", otp) is False
    # lazy expiry: entry is still present
    assert "al@x.com" in otp_ledger.store


def test_reissue_overwrites_previous_code(otp_ledger):
    first = otp_ledger.issue("al@x.com")
    second = otp_ledger.issue("al@x.com")
    assert len(otp_ledger.store) == 1
    assert otp_ledger.verify("al@x.com", second) is True
    if first != second:
        assert otp_ledger.verify("al@x.com", first) is False


def test_consume_removes_code(otp_ledger):
    otp = otp_ledger.issue("al@x.com")
    otp_ledger.consume("al@x.com")
    assert otp_ledger.verify("al@x.com", otp) is False
    otp_ledger.consume("al@x.com")
