from datetime import UTC, datetime

import pytest

from watchdesk.exceptions import ValidationError
from watchdesk.report.timezones import COMMON_TIMEZONES, resolve_timezone, timezone_info


class TestResolveTimezone:
    @pytest.mark.parametrize("alias", sorted(COMMON_TIMEZONES))
    def test_every_alias_resolves(self, alias):
        assert resolve_timezone(alias).key == COMMON_TIMEZONES[alias]

    def test_alias_is_case_insensitive(self):
        assert resolve_timezone("pkt").key == "Asia/Karachi"

    def test_iana_name(self):
        assert resolve_timezone("Europe/Berlin").key == "Europe/Berlin"

    @pytest.mark.parametrize("label", ["", "Mars/Olympus", "../etc/passwd"])
    def test_unknown_rejected(self, label):
        with pytest.raises(ValidationError):
            resolve_timezone(label)


class TestTimezoneInfo:
    def test_fixed_offset_zone(self):
        info = timezone_info(resolve_timezone("PKT"), datetime(2025, 10, 20, 12, 0, tzinfo=UTC))
        assert info.timezone == "Asia/Karachi"
        assert info.offset == "+05:00"
        assert info.offset_minutes == 300
        assert info.is_dst is False
        assert info.current_time == "2025-10-20 17:00:00"

    def test_negative_offset_with_dst(self):
        info = timezone_info(resolve_timezone("EST"), datetime(2025, 7, 1, 12, 0, tzinfo=UTC))
        assert info.offset == "-04:00"
        assert info.is_dst is True
