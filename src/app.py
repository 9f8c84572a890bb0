# app.py
import streamlit as st

from config import (
    DATA_FILE,
    LAB_MORNING_COLUMNS,
    LAB_TIMES,
    LOG_LEVEL,
    SLOT_COLORS,
    THEORY_MORNING_COLUMNS,
    THEORY_TIMES,
    TIMETABLE_TITLE,
    configure_logging,
)
from errors import ValidationError
from exporter import export_ics, export_json, export_pdf, export_png
from interaction import (
    AwaitingAlternativeChoice,
    AwaitingCombinationChoice,
    AwaitingFormSubmit,
    SlotInteraction,
)
from store import SnapshotFile, TimetableStore
from timeslots import DAYS, TIMETABLE_STRUCTURE


# -----------------------------------------------------------
# Streamlit Config
# -----------------------------------------------------------
st.set_page_config(layout="wide", page_title="FFCS Timetable Builder")  # type: ignore

st.markdown("""
<style>
    div[data-testid="stButton"] button { width: 100%; min-height: 3.2rem; white-space: pre-line; font-size: 0.75rem; }
    .course-card { padding: 6px 8px; border-radius: 6px; border: 1px solid #e5e7eb; margin-bottom: 6px; }
</style>
""", unsafe_allow_html=True)


# -----------------------------------------------------------
# Session State
# -----------------------------------------------------------
if "store" not in st.session_state:
    configure_logging(LOG_LEVEL)
    st.session_state.store = TimetableStore.open(SnapshotFile(DATA_FILE))
if "interaction" not in st.session_state:
    st.session_state.interaction = SlotInteraction(st.session_state.store)

store: TimetableStore = st.session_state.store
interaction: SlotInteraction = st.session_state.interaction


# -----------------------------------------------------------
# Callbacks
# -----------------------------------------------------------

def on_cell_click(cell_code: str):
    interaction.click(cell_code)


def on_choose_alternative(option: str):
    try:
        interaction.choose_alternative(option)
    except ValidationError as e:
        st.error(str(e))
        return
    st.toast(f"Slot preference saved: {option}. This choice will be remembered.")


def on_choose_combination(combination):
    interaction.choose_combination(combination)


def on_clear_slot():
    cleared = interaction.clear()
    if cleared:
        st.toast(f"{len(cleared)} slot(s) cleared: {', '.join(cleared)}")


def cell_button(day: str, slot_type: str, column: int, cell_code, clashing):
    key = f"{day}-{slot_type}-{column}"
    if not cell_code:
        st.button(" ", key=key, disabled=True)
        return

    slot = store.resolve_slot(cell_code)
    assignment = store.cell_assignment(cell_code)
    label = f"{slot}\n{assignment.course_code}" if assignment else slot
    st.button(
        label,
        key=key,
        type="primary" if assignment else "secondary",
        disabled=assignment is None and slot in clashing,
        help=f"{assignment.course_name} · {assignment.professor_name}" if assignment else None,
        on_click=on_cell_click,
        args=(cell_code,),
    )


# -----------------------------------------------------------
# Sidebar UI
# -----------------------------------------------------------

with st.sidebar:
    st.header("FFCS Builder")
    st.caption("Freshers Winter 2025-26")

    st.subheader("Your Courses")
    courses = store.courses
    if not courses:
        st.caption("_Click any slot to add a course_")
    for course in courses:
        st.markdown(
            f"<div class='course-card' style='border-left: 5px solid {course.color}'>"
            f"<b>{course.code}</b><br><small>{course.name}</small><br>"
            f"<small>{course.professor}</small><br><small>{', '.join(course.slots)}</small></div>",
            unsafe_allow_html=True,
        )

    st.divider()
    theory_free = store.available_slots("theory")
    lab_free = store.available_slots("lab")
    st.subheader("Available Theory Slots")
    st.caption(", ".join(theory_free[:20]) + (f" … +{len(theory_free) - 20} more" if len(theory_free) > 20 else ""))
    st.subheader("Available Lab Slots")
    st.caption(", ".join(lab_free[:12]) + (f" … +{len(lab_free) - 12} more" if len(lab_free) > 12 else ""))

    st.divider()
    s1, s2 = st.columns(2)
    s1.metric("Courses", len(courses))
    s2.metric("Slots Used", len(store.assignments))

    st.divider()
    st.subheader("Export")
    e1, e2 = st.columns(2)
    e1.download_button("PNG", export_png(store), "ffcs-timetable.png", "image/png")
    e2.download_button("PDF", export_pdf(store), "ffcs-timetable.pdf", "application/pdf")
    e3, e4 = st.columns(2)
    e3.download_button("Save", export_json(store), "ffcs-timetable.json", "application/json")
    e4.download_button("📅 .ics", export_ics(store), "ffcs-timetable.ics", "text/calendar")

    uploaded = st.file_uploader("Load a saved timetable (.json)", type=["json"])
    if uploaded and st.button("Load"):
        if store.import_data(uploaded.getvalue().decode("utf-8", errors="replace")):
            interaction.cancel()
            st.toast("Timetable loaded")
            st.rerun()
        else:
            st.error("Could not load this file: it is not a valid timetable save.")

    st.divider()
    confirm = st.checkbox("I want to clear the entire timetable")
    if st.button("Clear All", type="primary", disabled=not confirm):
        store.clear_all()
        interaction.cancel()
        st.toast("All slots have been cleared")
        st.rerun()


# -----------------------------------------------------------
# Main Layout
# -----------------------------------------------------------

st.title(TIMETABLE_TITLE)
st.caption("Click any slot to assign a course")

state = interaction.state

if isinstance(state, AwaitingAlternativeChoice):
    with st.container(border=True):
        st.markdown(f"#### Select Slot Preference: {state.cell_code}")
        st.caption("This slot has multiple options. Your choice is remembered for future assignments.")
        cols = st.columns(len(state.options) + 1)
        for col, option in zip(cols, state.options):
            col.button(option, key=f"alt-{option}", on_click=on_choose_alternative, args=(option,))
        cols[-1].button("Cancel", key="alt-cancel", on_click=interaction.cancel)

elif isinstance(state, AwaitingCombinationChoice):
    with st.container(border=True):
        st.markdown(f"#### Select Slot Combination: {state.slot_code}")
        st.caption("All slots in the chosen combination are assigned together.")
        cols = st.columns(len(state.combinations) + 1)
        for i, (col, combination) in enumerate(zip(cols, state.combinations)):
            col.button(" + ".join(combination), key=f"combo-{i}",
                       on_click=on_choose_combination, args=(combination,))
        cols[-1].button("Cancel", key="combo-cancel", on_click=interaction.cancel)

elif isinstance(state, AwaitingFormSubmit):
    with st.container(border=True):
        st.markdown(f"#### Assign Slot: {state.label}")

        existing = state.existing
        owner = store.get_course(existing.course_code) if existing else None
        same_course = set(owner.slots) if owner else set()
        conflicts = [c for c in state.clashes if c != state.slot_code and c not in same_course]
        if conflicts:
            st.warning(f"⚠️ Clashes with: {', '.join(conflicts)}")

        quick = None
        if courses:
            names = ["(none)"] + [c.code for c in courses]
            picked = st.selectbox("Quick select existing course", names)
            quick = store.get_course(picked) if picked != "(none)" else None

        defaults = {
            "code": existing.course_code if existing else (quick.code if quick else ""),
            "name": existing.course_name if existing else (quick.name if quick else ""),
            "prof": existing.professor_name if existing else (quick.professor if quick else ""),
            "color": existing.color_tag if existing else (quick.color if quick else SLOT_COLORS[0]),
        }

        with st.form("assign_form"):
            course_code = st.text_input("Course Code *", value=defaults["code"], placeholder="e.g., CSE1001")
            course_name = st.text_input("Course Name *", value=defaults["name"], placeholder="e.g., Problem Solving")
            professor = st.text_input("Professor Name", value=defaults["prof"], placeholder="e.g., Dr. Smith")
            color_index = SLOT_COLORS.index(defaults["color"]) if defaults["color"] in SLOT_COLORS else 0
            color = st.selectbox("Color Tag", SLOT_COLORS, index=color_index)
            submitted = st.form_submit_button("Update" if existing else "Assign", type="primary")

        if submitted:
            try:
                assigned = interaction.submit(course_code, course_name, professor, color)
            except ValidationError as e:
                st.error(str(e))
            else:
                st.toast(f"{course_code.strip()} assigned to {len(assigned)} slot(s): {', '.join(assigned)}")
                st.rerun()

        b1, b2 = st.columns(2)
        if existing:
            b1.button("Clear Slot", on_click=on_clear_slot)
        b2.button("Cancel", on_click=interaction.cancel)


# -----------------------------------------------------------
# Grid
# -----------------------------------------------------------

clashing = store.clashing_codes()

header = st.columns(len(THEORY_TIMES) + 1)
header[0].markdown("**Theory Hours**")
for i, time in enumerate(THEORY_TIMES, start=1):
    suffix = " (after lunch)" if i - 1 == THEORY_MORNING_COLUMNS else ""
    header[i].caption(time + suffix)
lab_header = st.columns(len(LAB_TIMES) + 1)
lab_header[0].markdown("**Lab Hours**")
for i, time in enumerate(LAB_TIMES, start=1):
    suffix = " (after lunch)" if i - 1 == LAB_MORNING_COLUMNS else ""
    lab_header[i].caption(time + suffix)

for day in DAYS:
    st.divider()
    row = st.columns(len(THEORY_TIMES) + 1)
    row[0].markdown(f"**{day}**  \nTheory")
    for column, cell_code in enumerate(TIMETABLE_STRUCTURE[day]["theory"]):
        with row[column + 1]:
            cell_button(day, "theory", column, cell_code, clashing)

    lab_row = st.columns(len(LAB_TIMES) + 1)
    lab_row[0].markdown("Lab")
    for column, cell_code in enumerate(TIMETABLE_STRUCTURE[day]["lab"]):
        with lab_row[column + 1]:
            cell_button(day, "lab", column, cell_code, clashing)
