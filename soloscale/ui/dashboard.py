"""Read-only staff dashboard and the client portal."""

from __future__ import annotations

from typing import Any

import streamlit as st

from soloscale.domains.catalog import jurisdiction_label
from soloscale.domains.conflicts import check_conflict
from soloscale.infrastructure.matter_store import parse_audit_entry
from soloscale.utils.formatting import format_currency, format_file_size, format_timestamp, humanize_id


def matter_summary(matter: dict[str, Any]) -> dict[str, Any]:
    """Flatten a matter into the fields the dashboard card shows."""
    intake = matter.get("intake") or {}
    details = intake.get("details") or {}
    contact = intake.get("contact") or {}
    opposing = details.get("opposing_party") or ""
    return {
        "id": matter["id"],
        "service": humanize_id(intake.get("service_id") or "").upper(),
        "status": humanize_id(matter["status"]),
        "is_conflict": matter["status"] == "conflict_flagged",
        "is_rush": intake.get("urgency") == "rush",
        "client": contact.get("name") or "Unknown",
        "email": contact.get("email") or "",
        "jurisdiction": jurisdiction_label(intake.get("jurisdiction") or ""),
        "opposing_party": opposing,
        "opposing_match": bool(opposing) and check_conflict(opposing),
        "description": details.get("description") or "",
        "submitted": format_timestamp(matter.get("created_at") or ""),
        "price": format_currency(matter.get("price") or 0),
    }


def _render_matter_card(matter: dict[str, Any], st=st) -> None:
    s = matter_summary(matter)
    with st.container(border=True):
        head, badges = st.columns([3, 1])
        with head:
            st.markdown(f"#### {s['service']}")
            st.caption(f"#{s['id']} · Submitted: {s['submitted']} · {s['jurisdiction']} · {s['price']}")
        with badges:
            if s["is_conflict"]:
                st.error(s["status"].upper())
            else:
                st.info(s["status"].upper())
            if s["is_rush"]:
                st.warning("⏱️ RUSH")

        st.markdown(f"**Client:** {s['client']} ({s['email']})")
        if s["opposing_party"]:
            marker = " **(MATCH FOUND)**" if s["opposing_match"] else ""
            line = f"**Opposing:** {s['opposing_party']}{marker}"
            st.markdown(f":red[{line}]" if s["opposing_match"] else line)
        st.markdown(f"**Desc:** {s['description']}")

        if matter.get("triage"):
            t = matter["triage"]
            st.caption(f"AI triage: {humanize_id(t.get('service_id', ''))} ({float(t.get('confidence') or 0):.0%})")

        for f in matter.get("files") or []:
            st.markdown(f"📎 [{f['name']}]({f['data_url']}) · {format_file_size(f['size'])}")

        with st.expander("Audit Log"):
            for entry in matter.get("audit_log") or []:
                e = parse_audit_entry(entry)
                st.markdown(f"`{format_timestamp(e['timestamp'])}` **{e['action']}:** {e['details']}")


def render_admin_dashboard(store: Any, st=st) -> None:
    stats = store.stats()
    matters = store.list_matters()

    title, c_conf, c_new = st.columns([3, 1, 1])
    title.subheader("Attorney Dashboard")
    c_conf.metric("Conflicts", stats["conflicts"])
    c_new.metric("New", stats["new"])

    main, side = st.columns([2, 1])
    with main:
        if not matters:
            st.caption("_No active matters._")
        for matter in reversed(matters):
            _render_matter_card(matter, st=st)
    with side:
        with st.container(border=True):
            st.markdown("#### Quick Stats")
            st.metric("Revenue (Simulated)", format_currency(stats["revenue"]))
            st.metric("Matters", stats["total"])
            st.metric("Rush", stats["rush"])


def render_client_portal(store: Any, st=st) -> None:
    st.subheader("Your Matters")
    email = st.text_input("Email used at intake", value=st.session_state.get("portal_email", ""), key="portal_lookup")
    if not email:
        st.caption("Enter the email address you used at intake to see your matters.")
        return
    st.session_state.portal_email = email
    matters = store.matters_for_email(email)
    if not matters:
        st.info("No matters found for that email address.")
        return
    for matter in reversed(matters):
        s = matter_summary(matter)
        with st.container(border=True):
            c1, c2 = st.columns([3, 1])
            c1.markdown(f"**{humanize_id(matter['intake'].get('service_id') or '')}**")
            c1.caption(f"ID: {s['id']} · {s['submitted']}")
            # Clients see "Reviewing" until staff move the matter on.
            status = "Completed" if matter["status"] == "completed" else "Reviewing"
            c2.markdown(f"`{status}`")
