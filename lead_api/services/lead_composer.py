"""Rendering of lead notification and confirmation emails.

Pure presentation: takes sanitized submission fields and returns strings.
Optional fields only produce output when present and non-empty.
"""

from __future__ import annotations

from datetime import datetime
from html import escape
from typing import Mapping
from zoneinfo import ZoneInfo

BRAND_NAME = "Argentech"
BRAND_TAGLINE = "Niezależne doradztwo techniczne"
TIMEZONE = ZoneInfo("Europe/Warsaw")

_FONT_STACK = "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif"
_LABEL_CELL = "padding: 8px 0; color: #5c6370;"
_VALUE_CELL = "padding: 8px 0; color: #2c3039;"
_H3 = "color: #2c3039; margin-top: 24px;"
_TABLE = "width: 100%; border-collapse: collapse;"
_FOOTER = (
    '<hr style="margin-top: 32px; border: none; border-top: 1px solid #e2e4e8;">\n'
    '<p style="color: #7a8291; font-size: 12px;">{}</p>'
)

LeadData = Mapping[str, str]


def format_submitted_at(moment: datetime | None = None) -> str:
    """Render a timestamp in Polish local time, e.g. ``5.03.2026, 14:07:09``."""
    local = (moment or datetime.now(TIMEZONE)).astimezone(TIMEZONE)
    return f"{local.day}.{local.month:02d}.{local.year}, {local:%H:%M:%S}"


def pv_summary(data: LeadData) -> str | None:
    if not data.get("hasPV"):
        return None
    if data.get("pvPower"):
        return f"{data['hasPV']} ({data['pvPower']} kWp)"
    return data["hasPV"]


def storage_summary(data: LeadData) -> str | None:
    if not data.get("hasStorage"):
        return None
    if data.get("storageCapacity"):
        return f"{data['hasStorage']} ({data['storageCapacity']} kWh)"
    return data["hasStorage"]


def _building_rows(data: LeadData) -> list[tuple[str, str]]:
    rows = [
        ("Typ budynku", data.get("buildingType", "")),
        ("Powierzchnia", f"{data.get('area', '')} m²"),
        ("Województwo", data.get("location", "")),
    ]
    if data.get("currentHeating"):
        rows.append(("Aktualne źródło ciepła", data["currentHeating"]))
    if data.get("installation"):
        rows.append(("Instalacja grzewcza", data["installation"]))
    return rows


def _extra_rows(data: LeadData) -> list[tuple[str, str]]:
    rows = []
    pv = pv_summary(data)
    if pv:
        rows.append(("Fotowoltaika", pv))
    storage = storage_summary(data)
    if storage:
        rows.append(("Magazyn energii", storage))
    return rows


def lead_subject(data: LeadData) -> str:
    return (
        f"Nowe zgłoszenie - {data.get('buildingType', '')} "
        f"{data.get('area', '')}m² ({data.get('location', '')})"
    )


def confirmation_subject() -> str:
    return f"{BRAND_NAME} - Potwierdzenie zgłoszenia"


def format_lead_text(data: LeadData, submitted_at: datetime | None = None) -> str:
    """Plain-text (markdown-ish) business notification.

    Args:
        data: Sanitized submission fields.
        submitted_at: Submission time; defaults to now.

    Returns:
        str: Notification body with contact, building, optional extras and
            notes sections followed by the submission timestamp.
    """
    lines = [
        f"## Nowe zgłoszenie - {BRAND_NAME}",
        "",
        "### Dane kontaktowe",
        f"- **Email:** {data.get('email', '')}",
        f"- **Telefon:** {data.get('phone', '')}",
        "",
        "### Informacje o budynku",
    ]
    lines.extend(f"- **{label}:** {value}" for label, value in _building_rows(data))

    extras = _extra_rows(data)
    if extras:
        lines.extend(["", "### Dodatkowe informacje"])
        lines.extend(f"- **{label}:** {value}" for label, value in extras)

    if data.get("notes"):
        lines.extend(["", "### Uwagi od klienta", data["notes"]])

    lines.extend(["", "---", f"Zgłoszenie z: {format_submitted_at(submitted_at)}"])
    return "\n".join(lines)


def _html_table(rows: list[tuple[str, str]]) -> str:
    cells = []
    for index, (label, value) in enumerate(rows):
        label_style = f"{_LABEL_CELL} width: 40%;" if index == 0 else _LABEL_CELL
        cells.append(
            "<tr>"
            f'<td style="{label_style}">{escape(label)}:</td>'
            f'<td style="{_VALUE_CELL}">{escape(value)}</td>'
            "</tr>"
        )
    return f'<table style="{_TABLE}">' + "".join(cells) + "</table>"


def format_lead_html(data: LeadData, submitted_at: datetime | None = None) -> str:
    """Styled HTML rendering of the business notification.

    Mirrors ``format_lead_text`` section by section. Submitted values are
    HTML-escaped; line breaks in notes are kept as ``<br>``.
    """
    contact = _html_table(
        [("Email", data.get("email", "")), ("Telefon", data.get("phone", ""))]
    )
    parts = [
        f'<div style="font-family: {_FONT_STACK}; max-width: 600px; margin: 0 auto;">',
        '<h2 style="color: #243B53; border-bottom: 2px solid #243B53; padding-bottom: 10px;">'
        f"Nowe zgłoszenie - {BRAND_NAME}</h2>",
        f'<h3 style="{_H3}">Dane kontaktowe</h3>',
        contact,
        f'<h3 style="{_H3}">Informacje o budynku</h3>',
        _html_table(_building_rows(data)),
    ]

    extras = _extra_rows(data)
    if extras:
        parts.append(f'<h3 style="{_H3}">Dodatkowe informacje</h3>')
        parts.append(_html_table(extras))

    if data.get("notes"):
        notes = escape(data["notes"]).replace("\n", "<br>")
        parts.append(f'<h3 style="{_H3}">Uwagi od klienta</h3>')
        parts.append(
            '<p style="color: #2c3039; background-color: #f5f6f7; padding: 12px; '
            f'border-radius: 4px;">{notes}</p>'
        )

    parts.append(_FOOTER.format(f"Zgłoszenie z: {format_submitted_at(submitted_at)}"))
    parts.append("</div>")
    return "\n".join(parts)


def confirmation_html() -> str:
    """Static thank-you message sent to the submitter."""
    paragraph = '<p style="color: #2c3039; line-height: 1.6;">{}</p>'
    return "\n".join(
        [
            f'<div style="font-family: {_FONT_STACK}; max-width: 600px; margin: 0 auto; padding: 20px;">',
            '<h2 style="color: #243B53;">Dziękujemy za zgłoszenie</h2>',
            paragraph.format(
                "Otrzymaliśmy Twoje zgłoszenie dotyczące analizy systemu grzewczego."
            ),
            paragraph.format(
                "<strong>Skontaktujemy się w ciągu 24–48 godzin</strong>, aby omówić "
                "szczegóły i przygotować indywidualną wycenę."
            ),
            paragraph.format(
                "W międzyczasie, jeśli masz dodatkowe pytania, możesz odpowiedzieć na tę wiadomość."
            ),
            _FOOTER.format(f"{BRAND_NAME} – {BRAND_TAGLINE}"),
            "</div>",
        ]
    )
