"""
iCalendar (.ics) export of agenda items.

The agenda file can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

Agenda items only carry a start time, so timed items get a one hour
DURATION and untimed items become all-day events.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from classboard.model import AgendaItem

DEFAULT_DURATION = "PT1H"


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _ics_date(date_yyyy_mm_dd: str) -> str:
    return datetime.strptime(date_yyyy_mm_dd, "%Y-%m-%d").strftime("%Y%m%d")


def _ics_local(date_yyyy_mm_dd: str, time_hh_mm: str) -> str:
    """
    Convert date + time to ICS local datetime string 'YYYYMMDDTHHMM00'.
    Accepts 'HH:MM' and 'HH:MM:SS' (Postgres time columns return seconds).
    """
    hhmm = time_hh_mm.strip()[:5]
    dt = datetime.strptime(f"{date_yyyy_mm_dd} {hhmm}", "%Y-%m-%d %H:%M")
    return dt.strftime("%Y%m%dT%H%M00")


def _summary(item: AgendaItem) -> str:
    title = item.title.strip() or "Agenda"
    if item.klass and item.klass.title:
        return f"{title} ({item.klass.title})"
    return title


def export_agenda_to_ics(items: Iterable[AgendaItem], out_path: str | Path) -> int:
    """
    Export agenda items to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//classboard//EN")
    lines.append("CALSCALE:GREGORIAN")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    count = 0
    for item in items:
        date = item.date.strip()
        time: Optional[str] = (item.time or "").strip() or None
        if not date:
            continue

        try:
            if time:
                start_line = f"DTSTART:{_ics_local(date, time)}"
            else:
                start_line = f"DTSTART;VALUE=DATE:{_ics_date(date)}"
        except ValueError:
            continue

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:classboard-agenda-{_ics_escape(str(item.id))}")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(start_line)
        if time:
            lines.append(f"DURATION:{DEFAULT_DURATION}")
        lines.append(f"SUMMARY:{_ics_escape(_summary(item))}")
        if item.type:
            lines.append(f"CATEGORIES:{_ics_escape(item.type)}")
        lines.append("END:VEVENT")
        count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    out.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return count
