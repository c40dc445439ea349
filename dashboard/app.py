"""Streamlit dashboard for the coordinator timetable API."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st

# ==========================================
# Configuration & Constants
# ==========================================
API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
WORK_SHIFTS = ["Manhã", "Tarde", "Noite"]
ROOM_TYPES = ["sala", "laboratorio", "auditorio"]
EQUIPMENT_OPTIONS = ["Projetor", "Computadores", "Quadro Branco", "Som", "Ar Condicionado"]

st.set_page_config(
    page_title="Coordinator Timetable",
    page_icon="🗓️",
    layout="wide",
)


# ==========================================
# API Helper Functions
# ==========================================
def _headers() -> Dict[str, str]:
    token = st.session_state.get("access_token")
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def api_call(method: str, path: str, **kwargs: Any) -> Optional[Any]:
    """Call the backend and surface failures in the page instead of raising."""
    try:
        response = requests.request(
            method,
            f"{API_BASE_URL}{path}",
            headers=_headers(),
            timeout=10,
            **kwargs,
        )
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Backend call failed ({method} {path}): {e}")
        return None


def show_notifications() -> None:
    """Render queued notifications as toasts, then clear them."""
    items = api_call("GET", "/notifications", params={"drain": True}) or []
    for item in items:
        icon = "✅" if item.get("level") == "success" else "⚠️"
        st.toast(item.get("message", ""), icon=icon)


# ==========================================
# UI Page Functions
# ==========================================
def render_login_sidebar() -> None:
    st.sidebar.markdown("### Session")
    coordinator_id = st.sidebar.text_input("Coordinator ID", value="local-coordinator")
    access_token = st.sidebar.text_input("Access token", type="password")
    if st.sidebar.button("Login"):
        result = api_call(
            "POST",
            "/login",
            json={"coordinator_id": coordinator_id, "access_token": access_token},
        )
        if result:
            st.session_state["access_token"] = result["access_token"]
            st.sidebar.success(f"Signed in as {result['coordinator_id']}")


def _grid_frame(timetable: Dict[str, Any]) -> pd.DataFrame:
    labels = {slot["slot_id"]: slot["label"] for slot in timetable["time_slots"]}
    rows = []
    for cell in timetable["cells"]:
        if cell["is_break"]:
            text = "Intervalo"
        elif cell["entry"]:
            text = f"{cell.get('professor_name') or '?'} / {cell.get('room_name') or '?'}"
            if cell["entry"]["has_conflict"]:
                text = f"⚠ {text}"
        else:
            text = ""
        rows.append({"slot": labels[cell["slot_id"]], "day": cell["day"], "text": text})
    frame = pd.DataFrame(rows)
    if frame.empty:
        return frame
    grid = frame.pivot(index="slot", columns="day", values="text")
    return grid.reindex(
        index=[labels[slot["slot_id"]] for slot in timetable["time_slots"]],
        columns=timetable["days"],
    )


def render_timetable_page() -> None:
    st.header("🗓️ Timetable")
    st.markdown("Pick a professor or a room, then drop it onto a cell. "
                "A class is saved once both halves land on the grid.")

    # Reload from the stores on every entry to the page, and on demand.
    entered = st.session_state.get("last_page") != "Timetable"
    if st.button("Refresh") or entered:
        api_call("POST", "/refresh")

    timetable = api_call("GET", "/timetable")
    professors = api_call("GET", "/professors") or []
    rooms = api_call("GET", "/rooms") or []
    if not timetable:
        return

    st.dataframe(_grid_frame(timetable), use_container_width=True)

    assignable = [slot for slot in timetable["time_slots"] if not slot["is_break"]]
    col1, col2, col3 = st.columns(3)
    with col1:
        entity_type = st.radio("Drag", ["professor", "room"], horizontal=True)
        options: List[Dict[str, Any]] = professors if entity_type == "professor" else rooms
        name_key = "full_name" if entity_type == "professor" else "name"
        id_key = "professor_id" if entity_type == "professor" else "room_id"
        choice = st.selectbox(
            "Entity",
            options,
            format_func=lambda item: item[name_key],
        )
    with col2:
        day = st.selectbox("Day", timetable["days"])
    with col3:
        slot = st.selectbox(
            "Time slot",
            assignable,
            format_func=lambda item: item["label"],
        )

    if st.button("Drop", type="primary") and choice and slot:
        api_call(
            "POST",
            "/drag",
            json={
                "entity_type": entity_type,
                "entity_id": choice[id_key],
                "display_name": choice[name_key],
            },
        )
        outcome = api_call("POST", "/drop", json={"day": day, "slot_id": slot["slot_id"]})
        if outcome and outcome["status"] == "pending":
            st.info(f"Waiting for the other half ({outcome['assignment']['phase']}).")

    state = api_call("GET", "/dashboard_state")
    if state:
        metric_col1, metric_col2, metric_col3 = st.columns(3)
        metric_col1.metric("Classes", state["schedule_count"])
        metric_col2.metric("Conflicts", state["conflict_count"])
        metric_col3.metric("Pending", state["assignment"]["phase"])


def render_professors_page() -> None:
    st.header("👩‍🏫 Professors")
    with st.form("form-professor", clear_on_submit=True):
        full_name = st.text_input("Full name")
        email = st.text_input("E-mail")
        institution = st.text_input("Additional institution")
        shifts = st.multiselect("Work shifts", WORK_SHIFTS)
        if st.form_submit_button("Register"):
            api_call(
                "POST",
                "/professors",
                json={
                    "full_name": full_name,
                    "email": email,
                    "additional_institution": institution,
                    "work_shifts": shifts,
                },
            )

    professors = api_call("GET", "/professors") or []
    if professors:
        st.dataframe(pd.DataFrame(professors), use_container_width=True)
        target = st.selectbox("Remove professor", professors, format_func=lambda p: p["full_name"])
        if st.button("Remove") and target:
            api_call("DELETE", f"/professors/{target['professor_id']}")
    else:
        st.info("No professors registered yet.")


def render_rooms_page() -> None:
    st.header("🚪 Rooms")
    with st.form("form-room", clear_on_submit=True):
        name = st.text_input("Name")
        room_type = st.selectbox("Type", ROOM_TYPES)
        capacity = st.number_input("Capacity", min_value=1, max_value=500, value=30)
        equipment = st.multiselect("Equipment", EQUIPMENT_OPTIONS)
        if st.form_submit_button("Register"):
            api_call(
                "POST",
                "/rooms",
                json={
                    "name": name,
                    "type": room_type,
                    "capacity": int(capacity),
                    "equipment": equipment,
                },
            )

    rooms = api_call("GET", "/rooms") or []
    if rooms:
        st.dataframe(pd.DataFrame(rooms), use_container_width=True)
        target = st.selectbox("Remove room", rooms, format_func=lambda r: r["name"])
        if st.button("Remove") and target:
            api_call("DELETE", f"/rooms/{target['room_id']}")
    else:
        st.info("No rooms registered yet.")


# ==========================================
# Main App Router
# ==========================================
def main() -> None:
    st.sidebar.title("Coordinator Timetable")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigation",
        ["Timetable", "Professors", "Rooms"]
    )

    st.sidebar.markdown("---")
    render_login_sidebar()

    if page == "Timetable":
        render_timetable_page()
    elif page == "Professors":
        render_professors_page()
    elif page == "Rooms":
        render_rooms_page()
    st.session_state["last_page"] = page

    show_notifications()


if __name__ == "__main__":
    main()
