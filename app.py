"""
SoloScale Legal intake: Streamlit UI entry point.
"""

import streamlit as st

# Load .env first so API keys and passcodes are picked up
from soloscale.utils.config import load_config, firm_name, log_file, llm_provider
load_config()

from soloscale.domains.profile import default_profile, is_staff
from soloscale.infrastructure.matter_store import MatterStore
from soloscale.orchestration.intake_wizard import IntakeWizard
from soloscale.utils.logger import setup_logger, get_logger
from soloscale.ui.layout import render_sidebar, render_hero, render_footer
from soloscale.ui.wizard_views import render_intake, render_not_eligible, render_success
from soloscale.ui.dashboard import render_admin_dashboard, render_client_portal

setup_logger("soloscale", level=__import__("logging").INFO, log_file=log_file())
log = get_logger()

FIRM = firm_name()

st.set_page_config(page_title=f"{FIRM} | Intake", page_icon="🛡️", layout="wide")


# One store for every session; matters are lost when the process restarts.
@st.cache_resource
def get_matter_store():
    log.info("Matter store initialised (in-memory, LLM provider: %s)", llm_provider())
    return MatterStore()


store = get_matter_store()

if "wizard" not in st.session_state:
    st.session_state.wizard = IntakeWizard()
if "profile" not in st.session_state:
    st.session_state.profile = default_profile()

wizard = st.session_state.wizard

render_sidebar(wizard, FIRM)

view = wizard.view
if view == "admin" and not is_staff(st.session_state.profile):
    st.warning("Staff sign-in required to view the dashboard.")
    view = "home"

if view == "home":
    render_hero(wizard)
elif view == "intake":
    render_intake(wizard, store, FIRM)
elif view == "not_eligible":
    render_not_eligible(wizard)
elif view == "success":
    render_success(wizard)
elif view == "portal":
    render_client_portal(store)
elif view == "admin":
    render_admin_dashboard(store)

render_footer(FIRM)
