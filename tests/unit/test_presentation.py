"""Formatting helpers shown to users: e-mail masking, CO2 amounts, rates."""

from guardian.progress.ledger import format_co2
from guardian.progress.stats_service import co2_equivalents, completion_rate
from guardian.users.privacy import display_name, mask_email


class TestMaskEmail:

    def test_masks_local_part(self):
        assert mask_email("alice@example.com") == "al***@example.com"

    def test_short_local_part(self):
        assert mask_email("a@b.io") == "a***@b.io"

    def test_never_leaks_full_address(self):
        assert "alice" not in mask_email("alice@example.com")


class TestDisplayName:

    def test_fallback(self):
        assert display_name(None) == "Climate Hero"
        assert display_name("") == "Climate Hero"
        assert display_name("   ") == "Climate Hero"

    def test_keeps_name(self):
        assert display_name("Greta") == "Greta"


class TestFormatCO2:

    def test_kilograms(self):
        assert format_co2(2.5) == "2.5kg"
        assert format_co2(0) == "0.0kg"

    def test_tonnes(self):
        assert format_co2(1234) == "1.2t"


class TestRates:

    def test_completion_rate(self):
        assert completion_rate(3, 1) == 75
        assert completion_rate(0, 0) == 0

    def test_equivalents(self):
        eq = co2_equivalents(42.0)
        assert eq["trees_absorbed"] == 2
        assert eq["car_miles"] == round(42.0 / 0.411)
        assert eq["flight_miles"] == round(42.0 / 0.255)
        assert eq["smartphone_charges"] == 5250
