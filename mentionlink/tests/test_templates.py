"""Tests for new-note template variables."""

from datetime import datetime

import pytest

from mentionlink.engine.config import LinkingSettings
from mentionlink.engine.templates import format_moment, replace_new_file_vars


MOMENT = datetime(2024, 3, 5, 14, 7, 9)


@pytest.mark.parametrize(
    "fmt,expected",
    [
        ("YYYY-MM-DD", "2024-03-05"),
        ("HH:mm:ss", "14:07:09"),
        ("D/M/YY", "5/3/24"),
        ("dddd", "Tuesday"),
        ("MMMM D", "March 5"),
        ("h:mm a", "2:07 pm"),
        ("hh A", "02 PM"),
        ("[Week of] YYYY", "Week of 2024"),
        ("", ""),
    ],
)
def test_format_moment(fmt, expected):
    assert format_moment(MOMENT, fmt) == expected


def test_midnight_is_twelve():
    assert format_moment(datetime(2024, 1, 1, 0, 30), "h:mm a") == "12:30 am"


class TestReplaceNewFileVars:
    def test_all_variables(self):
        content = "# {{title}}\n{{date}} {{time}} {{date:YYYY}}"

        result = replace_new_file_vars(content, "Bob", LinkingSettings(), now=MOMENT)

        assert result == "# Bob\n2024-03-05 14:07 2024"

    def test_configured_formats(self):
        settings = LinkingSettings(date_format="DD.MM.YYYY", time_format="h a")

        result = replace_new_file_vars("{{date}} {{time}}", "x", settings, now=MOMENT)

        assert result == "05.03.2024 2 pm"

    def test_unknown_variables_left_alone(self):
        content = "{{author}} {{ Title }}"

        result = replace_new_file_vars(content, "Bob", LinkingSettings(), now=MOMENT)

        assert result == "{{author}} Bob"
