"""
Exports of the current timetable: a pandas grid, PNG (matplotlib), PDF
(reportlab), calendar (.ics) and the JSON save file.
"""

import io
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pandas as pd
from ics import Calendar, Event
from loguru import logger
from matplotlib.figure import Figure
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from config import LAB_TIMES, THEORY_TIMES, TIMETABLE_TITLE, format_minutes
from store import TimetableStore
from timeslots import DAYS, iter_cells, time_range_of

KIND_LABELS = {"theory": "Theory", "lab": "Lab"}
EMPTY_CELL_COLOR = "#FFFFFF"


# -------------------------------------------------------------
# Cell records (shared by every export)
# -------------------------------------------------------------

def cell_records(store: TimetableStore) -> List[Dict[str, Any]]:
    records = []
    for occ, cell in iter_cells():
        assignment = store.cell_assignment(cell)
        slot = store.resolve_slot(cell)
        time_range = time_range_of(occ.type, occ.column)
        times = THEORY_TIMES if occ.type == "theory" else LAB_TIMES
        records.append({
            "day": occ.day,
            "kind": KIND_LABELS[occ.type],
            "column": occ.column,
            "time": times[occ.column],
            "start": time_range.start,
            "end": time_range.end,
            "slot": slot,
            "course": assignment.course_code if assignment else "",
            "course_name": assignment.course_name if assignment else "",
            "professor": assignment.professor_name if assignment else "",
            "color": assignment.color_tag if assignment else EMPTY_CELL_COLOR,
        })
    return records


def _time_columns(df: pd.DataFrame) -> List[str]:
    ordered = df.sort_values(["start", "end"])[["time"]].drop_duplicates()
    return list(ordered["time"])


def _row_index() -> pd.MultiIndex:
    return pd.MultiIndex.from_product([DAYS, list(KIND_LABELS.values())], names=["day", "kind"])


def build_grid_frame(store: TimetableStore, values: str = "label") -> pd.DataFrame:
    """
    Grid of the week: one row per (day, Theory/Lab), one column per time label.

    values: "label" for display text, "color" for the cell color.
    """
    df = pd.DataFrame(cell_records(store))
    df["label"] = df.apply(
        lambda r: f"{r['slot']}\n{r['course']}" if r["course"] else r["slot"], axis=1
    )
    fill = EMPTY_CELL_COLOR if values == "color" else ""
    grid = df.pivot(index=["day", "kind"], columns="time", values=values)
    return grid.reindex(index=_row_index(), columns=_time_columns(df)).fillna(fill)


# -------------------------------------------------------------
# Image / PDF
# -------------------------------------------------------------

def export_png(store: TimetableStore, dpi: int = 150) -> bytes:
    labels = build_grid_frame(store, "label")
    fills = build_grid_frame(store, "color")

    fig = Figure(figsize=(20, 10))
    ax = fig.add_subplot(111)
    ax.axis("off")
    table = ax.table(
        cellText=labels.values,
        rowLabels=[f"{day} {kind}" for day, kind in labels.index],
        colLabels=list(labels.columns),
        cellColours=fills.values,
        loc="center",
        cellLoc="center",
    )
    table.auto_set_font_size(False)
    table.set_fontsize(7)
    table.scale(1, 2.4)
    for (row, col), cell in table.get_celld().items():
        if row > 0 and col >= 0 and fills.values[row - 1][col] != EMPTY_CELL_COLOR:
            cell.get_text().set_color("white")
    fig.suptitle(TIMETABLE_TITLE, fontsize=14, weight="bold")

    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi, bbox_inches="tight")
    logger.info("Exported timetable as PNG")
    return buf.getvalue()


def export_pdf(store: TimetableStore) -> bytes:
    labels = build_grid_frame(store, "label")
    fills = build_grid_frame(store, "color")

    output = io.BytesIO()
    doc = SimpleDocTemplate(
        output,
        pagesize=landscape(A4),
        topMargin=0.4 * inch,
        bottomMargin=0.4 * inch,
        leftMargin=0.3 * inch,
        rightMargin=0.3 * inch,
    )
    styles = getSampleStyleSheet()
    elements = [Paragraph(TIMETABLE_TITLE, styles["Title"]), Spacer(1, 0.1 * inch)]

    table_data = [[""] + list(labels.columns)]
    for (day, kind), row in labels.iterrows():
        table_data.append([f"{day}\n{kind}"] + list(row.values))

    header_bg = colors.Color(0.18, 0.36, 0.6)
    grid_color = colors.HexColor("#B0BEC5")
    style_list = [
        ("BACKGROUND", (0, 0), (-1, 0), header_bg),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("BACKGROUND", (0, 1), (0, -1), colors.HexColor("#E9EFF8")),
        ("FONTNAME", (0, 1), (0, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 6),
        ("LEADING", (0, 0), (-1, -1), 7),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.5, grid_color),
    ]
    for r, row in enumerate(fills.values, start=1):
        for c, fill in enumerate(row, start=1):
            if fill != EMPTY_CELL_COLOR:
                style_list.append(("BACKGROUND", (c, r), (c, r), colors.HexColor(fill)))
                style_list.append(("TEXTCOLOR", (c, r), (c, r), colors.white))

    day_col_width = 0.6 * inch
    slot_col_width = (doc.width - day_col_width) / len(labels.columns)
    table = Table(table_data, repeatRows=1, colWidths=[day_col_width] + [slot_col_width] * len(labels.columns))
    table.setStyle(TableStyle(style_list))
    elements.append(table)

    courses = store.courses
    if courses:
        elements.append(Spacer(1, 0.2 * inch))
        legend_rows = [["Code", "Course", "Professor", "Slots"]]
        legend_style = [
            ("BACKGROUND", (0, 0), (-1, 0), header_bg),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.5, grid_color),
        ]
        for r, course in enumerate(courses, start=1):
            legend_rows.append([course.code, course.name, course.professor or "-", ", ".join(course.slots)])
            legend_style.append(("BACKGROUND", (0, r), (0, r), colors.HexColor(course.color)))
            legend_style.append(("TEXTCOLOR", (0, r), (0, r), colors.white))
        legend = Table(legend_rows, repeatRows=1)
        legend.setStyle(TableStyle(legend_style))
        elements.append(legend)

    doc.build(elements)
    logger.info("Exported timetable as PDF")
    return output.getvalue()


# -------------------------------------------------------------
# Calendar / JSON
# -------------------------------------------------------------

def export_ics(store: TimetableStore, today: Optional[datetime] = None) -> str:
    """Calendar with one event per occupied cell, dated in the coming week."""
    c = Calendar()
    today = today or datetime.now()
    days_ahead = 0 - today.weekday()
    if days_ahead <= 0:
        days_ahead += 7
    next_monday = (today + timedelta(days=days_ahead)).replace(hour=0, minute=0, second=0, microsecond=0)
    day_map = {day: next_monday + timedelta(days=i) for i, day in enumerate(DAYS)}

    for item in cell_records(store):
        if not item["course"]:
            continue
        base = day_map[item["day"]]
        e = Event(
            name=f"{item['course']} ({item['slot']})",
            begin=base + timedelta(minutes=item["start"]),
            end=base + timedelta(minutes=item["end"]),
        )
        span = f"{format_minutes(item['start'])}-{format_minutes(item['end'])}"
        e.description = f"{item['course_name']} | {span} | Professor: {item['professor'] or 'TBA'}"
        c.events.add(e)

    return c.serialize()


def export_json(store: TimetableStore) -> str:
    return store.export_data()
