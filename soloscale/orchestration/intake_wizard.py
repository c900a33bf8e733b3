"""
Intake wizard state and step transitions.

One IntakeWizard lives in each Streamlit session. Steps run in a fixed order:
jurisdiction -> triage -> service -> details -> contact -> sign -> pay.
Every transition validates its input first and leaves the state untouched
when validation fails.
"""

from __future__ import annotations

import copy
import traceback
from typing import Any

from soloscale.domains.catalog import URGENCY_LEVELS, get_service, is_eligible
from soloscale.domains.engagement import SignatureMismatchError, render_engagement_letter, sign_engagement
from soloscale.domains.payment import PaymentDeclinedError, authorize_payment
from soloscale.domains.pricing import quote
from soloscale.domains.validation import validate_contact, validate_details, validate_triage_description
from soloscale.utils.config import triage_min_confidence
from soloscale.utils.data_urls import encode_upload
from soloscale.utils.logger import get_logger, mask_email

logger = get_logger()

STEPS: tuple[str, ...] = ("jurisdiction", "triage", "service", "details", "contact", "sign", "pay")
STEP_TITLES: dict[str, str] = {
    "jurisdiction": "Eligibility",
    "triage": "Describe your issue",
    "service": "Choose a service",
    "details": "Details",
    "contact": "Contact",
    "sign": "Engagement letter",
    "pay": "Checkout",
}
VIEWS: tuple[str, ...] = ("home", "intake", "not_eligible", "success", "portal", "admin")

JURISDICTION, TRIAGE, SERVICE, DETAILS, CONTACT, SIGN, PAY = range(len(STEPS))

# Detail answers that change the quoted fee.
_FEE_DETAILS = ("page_count", "partner_count")


class StepValidationError(ValueError):
    """Raised when a step's input is incomplete or invalid. `issues` lists each problem."""

    def __init__(self, issues: list[str]) -> None:
        super().__init__("; ".join(issues))
        self.issues = list(issues)


def _blank_intake() -> dict[str, Any]:
    return {
        "jurisdiction": None,
        "service_id": None,
        "urgency": "standard",
        "details": {},
        "contact": {"name": "", "email": ""},
    }


class IntakeWizard:
    def __init__(self, triage_client: Any | None = None) -> None:
        # The triage client holds an HTTP config and is not pickled with the session.
        self._triage = triage_client
        self.view = "home"
        self._reset_intake()

    def _reset_intake(self) -> None:
        self.step = JURISDICTION
        self.intake: dict[str, Any] = _blank_intake()
        self.files: list[dict[str, Any]] = []
        self.triage_description = ""
        self.triage_result: dict[str, Any] | None = None
        self.triage_notice: str | None = None
        self.triage_error: str | None = None
        self.triage_accepted = False
        self.signature: dict[str, Any] | None = None
        self.last_matter: dict[str, Any] | None = None

    def __getstate__(self) -> dict[str, Any]:
        """Custom serialization - exclude the triage client."""
        state = dict(self.__dict__)
        state["_triage"] = None
        return copy.deepcopy(state)

    def __setstate__(self, state: dict[str, Any]) -> None:
        """Custom deserialization - the triage client is recreated lazily."""
        self.__dict__.update(state)
        self._triage = None

    # --- navigation ---

    @property
    def current_step(self) -> str:
        return STEPS[self.step]

    def progress(self) -> float:
        """Fraction of the wizard completed, 0.0 at the first step and 1.0 at checkout."""
        return self.step / (len(STEPS) - 1)

    def show(self, view: str) -> None:
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view}")
        self.view = view

    def start(self) -> None:
        """Begin a fresh intake."""
        self._reset_intake()
        self.view = "intake"
        logger.info("Intake started")

    def reset(self) -> None:
        """Discard all answers and return to the home view."""
        self._reset_intake()
        self.view = "home"

    def back(self) -> None:
        """Go one step back, keeping answers already given."""
        if self.step > JURISDICTION:
            self.step -= 1

    # --- step 1: jurisdiction ---

    def select_jurisdiction(self, jurisdiction: str) -> bool:
        """
        Record where the legal issue is located.

        Returns:
            True when eligible (moves to triage). OTHER and unknown codes route
            to the not_eligible view and return False.
        """
        code = (jurisdiction or "").upper()
        if not is_eligible(code):
            logger.info("Ineligible jurisdiction selected: %s", code or "<blank>")
            self.view = "not_eligible"
            return False
        self.intake["jurisdiction"] = code
        self.step = TRIAGE
        return True

    # --- step 2: triage ---

    def _ensure_triage(self) -> tuple[Any | None, str | None]:
        """Return (client, error_detail). error_detail is set when init fails."""
        if self._triage is not None:
            return self._triage, None
        try:
            from soloscale.orchestration.triage_client import TriageClient

            self._triage = TriageClient()
            return self._triage, None
        except Exception as e:
            logger.warning("Triage client init failed: %s", e)
            return None, f"Triage init failed: {type(e).__name__}: {e}"

    def _fall_back_to_catalog(self, notice: str, error: str | None) -> None:
        self.triage_result = None
        self.triage_notice = notice
        self.triage_error = error
        self.step = SERVICE

    def run_triage(self, description: str) -> dict[str, Any] | None:
        """
        Ask the model which service fits the description.

        Returns:
            The suggestion when it is confident enough; the wizard stays on the
            triage step so the client can accept it. On any failure, or a
            low-confidence answer, returns None and moves to manual service
            selection.

        Raises:
            StepValidationError: If the description is empty or too short.
        """
        check = validate_triage_description(description)
        if not check["passed"]:
            raise StepValidationError(check["issues"])
        self.triage_description = description.strip()
        self.triage_accepted = False

        client, init_err = self._ensure_triage()
        if client is None:
            self._fall_back_to_catalog(
                "Our assistant is unavailable right now. Please choose a service below.",
                init_err,
            )
            return None
        try:
            result = client.classify(self.triage_description)
        except Exception as e:
            logger.exception("Triage failed, falling back to manual selection: %s", e)
            self._fall_back_to_catalog(
                "We couldn't analyze your description. Please choose a service below.",
                f"{type(e).__name__}: {e}\n\n{traceback.format_exc()}",
            )
            return None

        if result["confidence"] < triage_min_confidence():
            service = get_service(result["service_id"]) or {"title": result["service_id"]}
            self._fall_back_to_catalog(
                f"This may be a fit for {service['title']}, but we're not sure. "
                f"{result['reasoning']}".strip(),
                None,
            )
            return None

        self.triage_result = result
        self.triage_notice = None
        self.triage_error = None
        return result

    def accept_triage(self) -> None:
        """Take the suggested service and continue to details."""
        if not self.triage_result:
            raise StepValidationError(["No recommendation to accept"])
        self.select_service(self.triage_result["service_id"])
        self.triage_accepted = True

    def skip_triage(self) -> None:
        """Browse the catalog manually."""
        self.triage_result = None
        self.triage_notice = None
        self.triage_accepted = False
        self.step = SERVICE

    # --- step 3: service ---

    def select_service(self, service_id: str) -> None:
        if get_service(service_id) is None:
            raise StepValidationError([f"Unknown service: {service_id}"])
        if self.intake["service_id"] != service_id:
            # Details are per-service; a new service starts a clean form.
            self.intake["details"] = {}
            self.files = []
            self.triage_accepted = False
            self.signature = None
        self.intake["service_id"] = service_id
        self.step = DETAILS

    # --- step 4: details ---

    def set_detail(self, key: str, value: Any) -> None:
        if key in _FEE_DETAILS and self.intake["details"].get(key) != value:
            self.signature = None
        self.intake["details"][key] = value

    def add_file(self, filename: str, data: bytes, mime: str | None = None) -> dict[str, Any]:
        """
        Attach an uploaded document, replacing any earlier file with the same name.

        Raises:
            UnsupportedUploadError: If the file is not a PDF or DOCX.
            UploadTooLargeError: If the file exceeds the upload cap.
        """
        entry = encode_upload(filename, data, mime)
        self.files = [f for f in self.files if f["name"] != filename] + [entry]
        self.intake["details"]["files"] = [f["name"] for f in self.files]
        return entry

    def remove_file(self, filename: str) -> None:
        self.files = [f for f in self.files if f["name"] != filename]
        self.intake["details"]["files"] = [f["name"] for f in self.files]

    def details_check(self) -> dict[str, Any]:
        return validate_details(self.intake["service_id"], self.intake["details"])

    def submit_details(self) -> None:
        check = self.details_check()
        if not check["passed"]:
            raise StepValidationError(check["issues"])
        self.step = CONTACT

    # --- step 5: contact ---

    def submit_contact(self, name: str, email: str) -> None:
        contact = {"name": (name or "").strip(), "email": (email or "").strip()}
        check = validate_contact(contact)
        if not check["passed"]:
            raise StepValidationError(check["issues"])
        if self.signature and contact["name"].lower() != self.intake["contact"]["name"].lower():
            # A signature is only valid for the name it was made against.
            self.signature = None
        self.intake["contact"] = contact
        logger.info("Contact captured: %s", mask_email(contact["email"]))
        self.step = SIGN

    # --- step 6: sign ---

    def quote(self, urgency: str | None = None) -> dict[str, Any]:
        return quote(self.intake["service_id"], self.intake["details"], urgency or self.intake["urgency"])

    def _letter_terms(self) -> dict[str, Any]:
        """What the engagement letter commits to. A signature is only valid for these terms."""
        return {
            "service_id": self.intake["service_id"],
            "jurisdiction": self.intake["jurisdiction"],
            "standard_total": self.quote("standard")["total"],
            "rush_total": self.quote("rush")["total"],
        }

    def engagement_letter(self, firm: str) -> str:
        return render_engagement_letter(
            firm,
            self.intake["contact"]["name"],
            self.intake["service_id"],
            self.intake["jurisdiction"],
            self.quote("standard")["total"],
            self.quote("rush")["total"],
        )

    def sign(self, typed_name: str, disclaimer_accepted: bool) -> dict[str, Any]:
        try:
            signed = sign_engagement(typed_name, self.intake["contact"]["name"], disclaimer_accepted)
        except SignatureMismatchError as e:
            raise StepValidationError([str(e)]) from e
        self.signature = dict(signed, terms=self._letter_terms())
        self.step = PAY
        return self.signature

    # --- step 7: pay ---

    def set_urgency(self, urgency: str) -> None:
        if urgency not in URGENCY_LEVELS:
            raise StepValidationError([f"Unknown turnaround: {urgency}"])
        self.intake["urgency"] = urgency

    def submit(self, store: Any, card_number: str, expiry: str, cvc: str) -> dict[str, Any]:
        """
        Authorize payment and create the matter.

        Returns:
            The created matter. The wizard moves to the success view.

        Raises:
            StepValidationError: If a step was skipped or the card is declined.
        """
        for check in (self.details_check(), validate_contact(self.intake["contact"])):
            if not check["passed"]:
                raise StepValidationError(check["issues"])
        if not self.signature:
            raise StepValidationError(["Sign the engagement letter before paying"])
        if self.signature.get("terms") != self._letter_terms():
            self.signature = None
            self.step = SIGN
            raise StepValidationError(["The engagement letter changed since you signed. Please review and sign again."])

        breakdown = self.quote()
        try:
            payment = authorize_payment(card_number, expiry, cvc, breakdown["total"])
        except PaymentDeclinedError as e:
            logger.info("Payment declined: %s", e)
            raise StepValidationError([str(e)]) from e

        triage = None
        if self.triage_accepted and self.triage_result:
            triage = dict(self.triage_result, description=self.triage_description)
        matter = store.create_matter(
            self.intake,
            breakdown,
            files=self.files,
            signature=self.signature,
            payment=payment,
            triage=triage,
        )
        self._reset_intake()
        self.last_matter = matter
        self.view = "success"
        return matter
