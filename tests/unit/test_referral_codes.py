"""Referral code generation tests."""

from guardian.referrals.codes import (
    REFERRAL_CHARSET,
    REFERRAL_SUFFIX_LENGTH,
    generate_referral_code,
    normalize_referral_code,
)


class TestReferralCodes:

    def test_default_prefix(self):
        assert generate_referral_code().startswith("hero")

    def test_suffix_length_and_charset(self):
        code = generate_referral_code(prefix="hero")
        suffix = code[len("hero"):]
        assert len(suffix) == REFERRAL_SUFFIX_LENGTH == 6
        assert all(c in REFERRAL_CHARSET for c in suffix)

    def test_codes_are_lowercase(self):
        for _ in range(100):
            code = generate_referral_code()
            assert code == code.lower()

    def test_codes_are_unique(self):
        codes = {generate_referral_code() for _ in range(1000)}
        assert len(codes) == 1000

    def test_custom_prefix(self):
        assert generate_referral_code(prefix="eco").startswith("eco")

    def test_normalize(self):
        assert normalize_referral_code("  HeroAB12CD ") == "heroab12cd"
