"""Streamlit views for each intake step.

Views only read wizard state and call wizard transitions; every rule lives in
the wizard or the domain modules.
"""

from __future__ import annotations

from typing import Any

import streamlit as st
from streamlit_mic_recorder import speech_to_text

from soloscale.domains.catalog import (
    JURISDICTIONS,
    LICENSED_JURISDICTIONS,
    SERVICES,
    URGENCY_LEVELS,
    get_service,
    jurisdiction_label,
    service_fields,
)
from soloscale.domains.engagement import DISCLAIMER_TEXT, signature_matches
from soloscale.domains.validation import validate_contact, validate_triage_description
from soloscale.orchestration.intake_wizard import STEP_TITLES, STEPS, StepValidationError
from soloscale.utils.data_urls import UnsupportedUploadError, UploadTooLargeError
from soloscale.utils.formatting import format_currency, format_file_size


_STEP_WIDGET_PREFIXES = ("triage_", "detail_", "contact_", "sign_", "pay_", "rm_")


def clear_step_widgets(st=st) -> None:
    """Drop widget state left over from a previous intake in this browser session."""
    for key in [k for k in st.session_state if str(k).startswith(_STEP_WIDGET_PREFIXES)]:
        del st.session_state[key]


def _show_issues(e: StepValidationError, st=st) -> None:
    for issue in e.issues:
        st.error(issue)


def _back_button(wizard: Any, key: str, st=st) -> None:
    if st.button("⬅️ Back", key=f"back_{key}"):
        wizard.back()
        st.rerun()


def render_progress(wizard: Any, st=st) -> None:
    step_name = wizard.current_step
    st.progress(
        wizard.progress(),
        text=f"Step {wizard.step + 1} of {len(STEPS)}: {STEP_TITLES[step_name]}",
    )


def render_jurisdiction_step(wizard: Any, st=st) -> None:
    st.subheader("First, let's check eligibility")
    st.write("We are currently licensed to practice law in specific states. Where is your legal issue located?")
    for code in JURISDICTIONS:
        if st.button(jurisdiction_label(code), key=f"jur_{code}", use_container_width=True):
            wizard.select_jurisdiction(code)
            st.rerun()


def render_triage_step(wizard: Any, st=st) -> None:
    st.subheader("Tell us what's going on")
    st.write("Describe your situation in a few sentences and we'll recommend the right service.")

    if "triage_text" not in st.session_state:
        st.session_state.triage_text = wizard.triage_description

    transcript = speech_to_text(
        language="en",
        start_prompt="🎤 Dictate",
        stop_prompt="⏹️ Stop",
        just_once=True,
        key="triage_voice",
    )
    if transcript:
        # Must run before the text_area below is instantiated.
        st.session_state.triage_text = f"{st.session_state.triage_text} {transcript}".strip()

    description = st.text_area(
        "Describe your issue",
        key="triage_text",
        height=150,
        placeholder="e.g. A client hasn't paid my last three invoices and stopped answering emails.",
    )
    check = validate_triage_description(description)

    if wizard.triage_result:
        result = wizard.triage_result
        service = get_service(result["service_id"]) or {"title": result["service_id"], "icon": ""}
        with st.container(border=True):
            st.markdown(f"#### {service['icon']} We recommend: {service['title']}")
            st.caption(f"Confidence: {result['confidence']:.0%}")
            if result["reasoning"]:
                st.write(result["reasoning"])
            c1, c2 = st.columns(2)
            if c1.button("Continue with this service", type="primary", key="triage_accept"):
                wizard.accept_triage()
                st.rerun()
            if c2.button("Browse all services", key="triage_browse"):
                wizard.skip_triage()
                st.rerun()

    c1, c2, c3 = st.columns([1, 1, 3])
    with c1:
        _back_button(wizard, "triage", st=st)
    if c2.button("Skip", key="triage_skip"):
        wizard.skip_triage()
        st.rerun()
    if c3.button("Get recommendation", disabled=not check["passed"], key="triage_run"):
        with st.spinner("Reviewing your description…"):
            try:
                wizard.run_triage(description)
            except StepValidationError as e:
                _show_issues(e, st=st)
                return
        st.rerun()
    if not check["passed"] and description:
        st.caption(check["issues"][0])


def render_service_step(wizard: Any, st=st) -> None:
    st.subheader("How can we help you?")
    if wizard.triage_notice:
        st.info(wizard.triage_notice)
    for service in SERVICES:
        with st.container(border=True):
            st.markdown(f"#### {service['icon']} {service['title']}")
            st.write(service["description"])
            st.markdown(f"**Starts at {format_currency(service['base_price'])}**")
            if st.button("Select", key=f"svc_{service['id']}"):
                wizard.select_service(service["id"])
                st.rerun()
    _back_button(wizard, "service", st=st)


def _render_field(wizard: Any, service_id: str, field: dict[str, Any], st=st) -> None:
    details = wizard.intake["details"]
    key = f"detail_{service_id}_{field['key']}"
    label = field["label"] + (" *" if field.get("required") else "")
    kind = field["kind"]

    if kind == "text":
        value = st.text_input(label, value=details.get(field["key"], ""), key=key,
                              placeholder=field.get("placeholder", ""), help=field.get("help"))
        wizard.set_detail(field["key"], value)
    elif kind == "textarea":
        value = st.text_area(label, value=details.get(field["key"], ""), key=key,
                             placeholder=field.get("placeholder", ""), height=120)
        wizard.set_detail(field["key"], value)
    elif kind == "count":
        value = st.number_input(label, min_value=0, step=1, value=int(details.get(field["key"]) or 0),
                                key=key, help=field.get("help"))
        wizard.set_detail(field["key"], int(value) if value else None)
    elif kind == "upload":
        uploads = st.file_uploader(label, type=["pdf", "docx"], accept_multiple_files=True,
                                   key=key, help=field.get("help"))
        in_widget = {f.name for f in uploads or []}
        for f in uploads or []:
            try:
                wizard.add_file(f.name, f.getvalue(), f.type)
            except (UnsupportedUploadError, UploadTooLargeError) as e:
                st.error(str(e))
        # Attached files outlive the uploader widget, which resets when the step is left.
        for existing in [f for f in wizard.files if f["name"] not in in_widget]:
            c1, c2 = st.columns([4, 1])
            c1.caption(f"📎 {existing['name']} · {format_file_size(existing['size'])}")
            if c2.button("Remove", key=f"rm_{existing['name']}"):
                wizard.remove_file(existing["name"])
                st.rerun()


def render_details_step(wizard: Any, st=st) -> None:
    service_id = wizard.intake["service_id"]
    service = get_service(service_id) or {"title": "request"}
    st.subheader(f"Tell us about your {service['title']}")

    for field in service_fields(service_id):
        _render_field(wizard, service_id, field, st=st)

    check = wizard.details_check()
    c1, c2 = st.columns([1, 4])
    with c1:
        _back_button(wizard, "details", st=st)
    if c2.button("Continue", type="primary", disabled=not check["passed"], key="details_next"):
        try:
            wizard.submit_details()
        except StepValidationError as e:
            _show_issues(e, st=st)
            return
        st.rerun()
    if not check["passed"]:
        st.caption(" · ".join(check["issues"]))


def render_contact_step(wizard: Any, st=st) -> None:
    st.subheader("How do we reach you?")
    contact = wizard.intake["contact"]
    name = st.text_input("Full Name *", value=contact.get("name", ""), key="contact_name")
    email = st.text_input("Email Address *", value=contact.get("email", ""), key="contact_email")
    check = validate_contact({"name": name, "email": email})

    c1, c2 = st.columns([1, 4])
    with c1:
        _back_button(wizard, "contact", st=st)
    if c2.button("Continue", type="primary", disabled=not check["passed"], key="contact_next"):
        try:
            wizard.submit_contact(name, email)
        except StepValidationError as e:
            _show_issues(e, st=st)
            return
        st.rerun()
    if not check["passed"] and (name or email):
        st.caption(" · ".join(check["issues"]))


def render_sign_step(wizard: Any, firm: str, st=st) -> None:
    st.subheader("Review and sign your engagement letter")
    st.text_area("Engagement letter", value=wizard.engagement_letter(firm), height=320, disabled=True)

    accepted = st.checkbox(DISCLAIMER_TEXT, key="sign_disclaimer")
    contact_name = wizard.intake["contact"]["name"]
    typed = st.text_input(f"Type your full name to sign ({contact_name})", key="sign_typed")
    matches = signature_matches(typed, contact_name)
    if typed and not matches:
        st.caption("Signature must match the name you entered on the contact step.")

    c1, c2 = st.columns([1, 4])
    with c1:
        _back_button(wizard, "sign", st=st)
    if c2.button("Sign & Continue", type="primary", disabled=not (matches and accepted), key="sign_next"):
        try:
            wizard.sign(typed, accepted)
        except StepValidationError as e:
            _show_issues(e, st=st)
            return
        st.rerun()


def render_pay_step(wizard: Any, store: Any, st=st) -> None:
    left, right = st.columns([2, 1])
    with left:
        st.subheader("Select Turnaround Time")
        options = list(URGENCY_LEVELS)
        urgency = st.radio(
            "Turnaround",
            options,
            index=options.index(wizard.intake["urgency"]),
            format_func=lambda u: f"{URGENCY_LEVELS[u]['label']} · {URGENCY_LEVELS[u]['turnaround']}"
            + (" (+50% fee)" if u == "rush" else " (included)"),
            label_visibility="collapsed",
        )
        wizard.set_urgency(urgency)

        st.subheader("Payment")
        st.info("🔒 Payments are authorized securely. Funds are held until the conflict check passes.")
        card = st.text_input("Card number", placeholder="4242 4242 4242 4242", key="pay_card")
        c1, c2 = st.columns(2)
        expiry = c1.text_input("Expiry (MM/YY)", key="pay_expiry")
        cvc = c2.text_input("CVC", type="password", key="pay_cvc")

    breakdown = wizard.quote()
    service = get_service(wizard.intake["service_id"]) or {"title": ""}
    with right:
        with st.container(border=True):
            st.markdown("#### Order Summary")
            st.write(f"{service['title']}: {format_currency(breakdown['base'])}")
            if breakdown["complexity"] > 0:
                st.write(f"Complexity Add-on: +{format_currency(breakdown['complexity'])}")
            if breakdown["rush"] > 0:
                st.write(f"Rush Fee: +{format_currency(breakdown['rush'])}")
            st.markdown(f"**Total: {format_currency(breakdown['total'])}**")
            ready = bool(card and expiry and cvc)
            if st.button("Pay & Submit", type="primary", disabled=not ready, use_container_width=True):
                try:
                    wizard.submit(store, card, expiry, cvc)
                except StepValidationError as e:
                    _show_issues(e, st=st)
                    return
                clear_step_widgets(st=st)
                st.rerun()
            st.caption(
                "By clicking above, you agree to the Terms of Service and understand no "
                "attorney-client relationship is formed until explicitly confirmed."
            )
    _back_button(wizard, "pay", st=st)


def render_intake(wizard: Any, store: Any, firm: str, st=st) -> None:
    render_progress(wizard, st=st)
    step = wizard.current_step
    if step == "jurisdiction":
        render_jurisdiction_step(wizard, st=st)
    elif step == "triage":
        render_triage_step(wizard, st=st)
    elif step == "service":
        render_service_step(wizard, st=st)
    elif step == "details":
        render_details_step(wizard, st=st)
    elif step == "contact":
        render_contact_step(wizard, st=st)
    elif step == "sign":
        render_sign_step(wizard, firm, st=st)
    elif step == "pay":
        render_pay_step(wizard, store, st=st)


def render_not_eligible(wizard: Any, st=st) -> None:
    states = ", ".join(LICENSED_JURISDICTIONS)
    st.warning("⚠️ We can't help you just yet.")
    st.write(
        f"To ensure ethical compliance, we only accept matters in {states}. "
        "We recommend checking your local State Bar Association's referral service."
    )
    if st.button("Back to Home"):
        wizard.reset()
        clear_step_widgets(st=st)
        st.rerun()


def render_success(wizard: Any, st=st) -> None:
    st.success("✅ Intake Received")
    matter = wizard.last_matter or {}
    if matter:
        st.write(f"Your matter reference is **{matter['id']}**. Total authorized: {format_currency(matter['price'])}.")
    st.write("We have received your payment and information. Your attorney is reviewing the file now.")
    st.markdown("#### What happens next?")
    for i, step in enumerate(
        [
            "Conflict check initiated (Automated + Manual Review)",
            "Attorney reviews your uploaded documents",
            "You will receive a secure message if we need clarification",
            "Draft deliverables will be uploaded to your portal",
        ],
        1,
    ):
        st.write(f"{i}. {step}")
    if st.button("Go to Client Portal"):
        if matter:
            st.session_state.portal_email = (matter["intake"].get("contact") or {}).get("email", "")
        wizard.show("portal")
        st.rerun()
