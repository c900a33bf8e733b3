"""Page chrome: navigation sidebar, marketing hero and footer."""

from __future__ import annotations

from typing import Any

import streamlit as st

from soloscale.domains.catalog import LICENSED_JURISDICTIONS
from soloscale.domains.profile import default_profile, is_staff, sign_in_staff
from soloscale.ui.wizard_views import clear_step_widgets
from soloscale.utils.logger import get_logger

logger = get_logger()

_FEATURES = [
    ("⏱️", "Fast Turnaround", "Rush options available for 24h delivery."),
    ("🔒", "Secure Portal", "Bank-grade encryption for your documents."),
    ("✅", "Attorney Reviewed", "Every deliverable is reviewed by a human."),
]


def render_sidebar(wizard: Any, firm: str, st=st) -> None:
    """Navigation plus the mock staff sign-in. Mutates st.session_state.profile."""
    profile = st.session_state.get("profile") or default_profile()
    with st.sidebar:
        st.header(f"🛡️ {firm}")
        if st.button("Services", use_container_width=True):
            wizard.show("home")
            st.rerun()
        if st.button("Client Portal", use_container_width=True):
            wizard.show("portal")
            st.rerun()
        if is_staff(profile) and st.button("Attorney Dashboard", use_container_width=True):
            wizard.show("admin")
            st.rerun()

        st.divider()
        if is_staff(profile):
            st.caption(f"Signed in as **{profile['display_name']}** (staff)")
            if st.button("Sign out", use_container_width=True):
                st.session_state.profile = default_profile()
                if wizard.view == "admin":
                    wizard.show("home")
                st.rerun()
        else:
            with st.expander("Staff sign-in"):
                code = st.text_input("Passcode", type="password", key="staff_passcode")
                if st.button("Sign in", key="staff_sign_in"):
                    staff = sign_in_staff(code)
                    if staff:
                        st.session_state.profile = staff
                        logger.info("Staff signed in")
                        wizard.show("admin")
                        st.rerun()
                    else:
                        st.error("Invalid passcode")

        if wizard.view == "intake" and wizard.triage_error:
            with st.expander("Debug"):
                st.caption("Triage fell back to manual selection:")
                st.code(wizard.triage_error, language="text")


def render_hero(wizard: Any, st=st) -> None:
    states = ", ".join(list(LICENSED_JURISDICTIONS)[:-1]) + f", and {list(LICENSED_JURISDICTIONS)[-1]}"
    st.title("Legal services, productized.")
    st.markdown(
        f"Transparent flat fees. Fast turnarounds. Licensed in {states}. "
        "Start your intake in minutes without the hourly billing surprise."
    )
    if st.button("Start Intake ➡️", type="primary"):
        wizard.start()
        clear_step_widgets(st=st)
        st.rerun()

    cols = st.columns(len(_FEATURES))
    for col, (icon, title, desc) in zip(cols, _FEATURES):
        with col:
            st.markdown(f"### {icon}\n**{title}**")
            st.caption(desc)


def render_footer(firm: str, st=st) -> None:
    st.divider()
    st.caption(
        f"© {firm}. Not a law firm. No attorney-client relationship is formed until a "
        "written agreement is signed. · Privacy Policy · Terms of Service · Attorney Advertising"
    )
