"""Tests for lead notification and confirmation rendering."""

from datetime import datetime, timezone

import pytest

from lead_api.services.lead_composer import (
    confirmation_html,
    confirmation_subject,
    format_lead_html,
    format_lead_text,
    format_submitted_at,
    lead_subject,
    pv_summary,
    storage_summary,
)


def test_submitted_at_uses_warsaw_time() -> None:
    moment = datetime(2026, 7, 1, 8, 30, 5, tzinfo=timezone.utc)
    # CEST is UTC+2 in July
    assert format_submitted_at(moment) == "1.07.2026, 10:30:05"


def test_subject_summarizes_building(valid_lead: dict) -> None:
    assert lead_subject(valid_lead) == "Nowe zgłoszenie - istniejący 150m² (małopolskie)"


def test_confirmation_subject() -> None:
    assert confirmation_subject() == "Argentech - Potwierdzenie zgłoszenia"


class TestPlainText:
    def test_required_sections(self, valid_lead: dict, fixed_now: datetime) -> None:
        text = format_lead_text(valid_lead, fixed_now)

        assert "### Dane kontaktowe" in text
        assert "- **Email:** jan.kowalski@example.com" in text
        assert "- **Telefon:** +48 600 100 200" in text
        assert "- **Powierzchnia:** 150 m²" in text
        assert text.endswith("Zgłoszenie z: 5.03.2026, 14:07:09")

    def test_absent_optional_fields_produce_no_section(self, valid_lead: dict, fixed_now: datetime) -> None:
        text = format_lead_text(valid_lead, fixed_now)

        assert "Dodatkowe informacje" not in text
        assert "Uwagi od klienta" not in text
        assert "Fotowoltaika" not in text
        assert "Magazyn energii" not in text
        assert "Aktualne źródło ciepła" not in text
        assert "Instalacja grzewcza" not in text

    def test_empty_optional_fields_produce_no_section(self, valid_lead: dict, fixed_now: datetime) -> None:
        valid_lead.update({"hasPV": "", "hasStorage": "", "notes": "", "currentHeating": ""})
        text = format_lead_text(valid_lead, fixed_now)

        assert "Dodatkowe informacje" not in text
        assert "Uwagi od klienta" not in text
        assert "Aktualne źródło ciepła" not in text

    def test_all_optional_sections(self, full_lead: dict, fixed_now: datetime) -> None:
        text = format_lead_text(full_lead, fixed_now)

        assert "- **Aktualne źródło ciepła:** kocioł gazowy" in text
        assert "- **Instalacja grzewcza:** grzejniki" in text
        assert "### Dodatkowe informacje" in text
        assert "- **Fotowoltaika:** tak (6.5 kWp)" in text
        assert "- **Magazyn energii:** tak (10 kWh)" in text
        assert "### Uwagi od klienta\nProszę o kontakt po 16.\nDom z 1985 r." in text


class TestHtml:
    def test_absent_optional_fields_produce_no_section(self, valid_lead: dict, fixed_now: datetime) -> None:
        html = format_lead_html(valid_lead, fixed_now)

        assert "Dane kontaktowe" in html
        assert "Informacje o budynku" in html
        assert "Dodatkowe informacje" not in html
        assert "Uwagi od klienta" not in html
        assert "5.03.2026, 14:07:09" in html

    def test_all_optional_sections(self, full_lead: dict, fixed_now: datetime) -> None:
        html = format_lead_html(full_lead, fixed_now)

        assert "Dodatkowe informacje" in html
        assert "tak (6.5 kWp)" in html
        assert "tak (10 kWh)" in html
        assert "Proszę o kontakt po 16.<br>Dom z 1985 r." in html

    def test_only_storage_still_renders_extras(self, valid_lead: dict, fixed_now: datetime) -> None:
        valid_lead["hasStorage"] = "nie"
        html = format_lead_html(valid_lead, fixed_now)

        assert "Dodatkowe informacje" in html
        assert "Magazyn energii" in html
        assert "Fotowoltaika" not in html

    def test_user_values_are_escaped(self, valid_lead: dict, fixed_now: datetime) -> None:
        valid_lead["notes"] = "<script>alert(1)</script>"
        valid_lead["location"] = "a & b"
        html = format_lead_html(valid_lead, fixed_now)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "a &amp; b" in html


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ({}, None),
        ({"pvPower": "5"}, None),
        ({"hasPV": "tak"}, "tak"),
        ({"hasPV": "tak", "pvPower": "5"}, "tak (5 kWp)"),
    ],
)
def test_pv_summary(data: dict, expected) -> None:
    assert pv_summary(data) == expected


def test_storage_summary() -> None:
    assert storage_summary({"hasStorage": "tak", "storageCapacity": "12"}) == "tak (12 kWh)"
    assert storage_summary({"storageCapacity": "12"}) is None


def test_confirmation_body_is_static() -> None:
    body = confirmation_html()
    assert "Dziękujemy za zgłoszenie" in body
    assert "24–48 godzin" in body
    assert body == confirmation_html()
