from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager

from .domain import (
    RECORD_SINGULAR,
    Allergy,
    AllergyDraft,
    Draft,
    LabDraft,
    LabRecord,
    MedicalRecord,
    Pet,
    PetDraft,
    RecordType,
    User,
    Vaccine,
    VaccineDraft,
    wire_name,
)
from .errors import LoadError, NavigationError, PetRecordsError, ValidationError
from .logging_helper import log_status
from .navigation import ADD_RECORD_SCREENS, Navigator, Screen

# Local collection holding each record type
RECORD_ATTRS = {
    RecordType.VACCINES: "vaccines",
    RecordType.ALLERGIES: "allergies",
    RecordType.LABS: "labs",
}


def _payload(draft, **owner) -> dict:
    if isinstance(draft, Draft):
        return draft.to_payload(**owner)
    payload = {wire_name(k): v for k, v in owner.items()}
    payload.update(draft)
    return payload


class PetHealthStore:
    """
    Client-side snapshot of what the screens show.

    Every mutation is a round-trip through ``api`` (an ApiClient or a
    MockApi); local state only changes after the call succeeds.  On failure
    ``error`` holds a user-visible message, local state is left as it was,
    and the error is re-raised for the caller.
    """

    def __init__(self, api, user: User | None = None):
        self.api = api
        self.user = user
        self.pets: list[Pet] = []
        self.selected_pet: Pet | None = None
        self.vaccines: list[Vaccine] = []
        self.allergies: list[Allergy] = []
        self.labs: list[LabRecord] = []
        self.error: str | None = None
        self.loading = False
        self.navigator = Navigator(logged_in=user is not None)

    @property
    def screen(self) -> Screen:
        return self.navigator.current

    def records(self, record_type) -> list:
        return getattr(self, RECORD_ATTRS[RecordType.parse(record_type)])

    @contextmanager
    def _request(self, failure_message: str):
        self.loading = True
        self.error = None
        try:
            yield
        except PetRecordsError as e:
            self.error = f"{failure_message}: {e.message}"
            log_status("error", self.error)
            raise
        finally:
            self.loading = False

    def _clear_records(self):
        self.vaccines = []
        self.allergies = []
        self.labs = []

    def _require_user(self) -> User:
        if self.user is None:
            raise ValidationError("Not logged in")
        return self.user

    def _require_selected_pet(self) -> Pet:
        if self.selected_pet is None:
            raise ValidationError("No pet selected")
        return self.selected_pet

    def _close_form(self, screen: Screen):
        if self.navigator.current is screen:
            self.navigator.back()

    # ----------------------------
    # Session
    # ----------------------------
    def register(self, email: str, password: str) -> User:
        with self._request("Registration failed"):
            user = self.api.register(email, password)
        self._start_session(user)
        return user

    def login(self, email: str, password: str) -> User:
        with self._request("Login failed"):
            user = self.api.login(email, password)
        self._start_session(user)
        return user

    def _start_session(self, user: User):
        self.user = user
        self.pets = []
        self.selected_pet = None
        self._clear_records()
        self.navigator.reset(Screen.DASHBOARD)
        log_status("good", f"Signed in as {user.email}")
        self.load_pets()

    def logout(self):
        self.user = None
        self.pets = []
        self.selected_pet = None
        self._clear_records()
        self.error = None
        self.navigator.reset(Screen.REGISTRATION)

    # ----------------------------
    # Loading
    # ----------------------------
    def load_pets(self, user_id: str | None = None) -> list[Pet]:
        with self._request("Failed to load pets"):
            user_id = user_id or self._require_user().id
            try:
                pets = self.api.get_pets(user_id)
            except PetRecordsError as e:
                raise LoadError(e.message, {"pets": e}) from e
            self.pets = list(pets)
        log_status("good", f"Loaded {len(self.pets)} pets")
        return self.pets

    def load_records(self, pet_id: str | None = None) -> None:
        """
        Fetch vaccines, allergies and labs concurrently and apply them only
        when all three succeed.  Any failure raises one LoadError naming every
        record type that failed; none of the three collections changes.
        """
        with self._request("Failed to load medical records"):
            pet_id = pet_id or self._require_selected_pet().id

            results, failures = {}, {}
            with ThreadPoolExecutor(max_workers=len(RECORD_ATTRS)) as executor:
                future_map = {
                    executor.submit(self.api.get_records, pet_id, kind): kind
                    for kind in RECORD_ATTRS
                }
                for fut in as_completed(future_map):
                    kind = future_map[fut]
                    try:
                        results[kind] = fut.result()
                    except PetRecordsError as e:
                        failures[kind.value] = e

            if failures:
                ordered = {k.value: failures[k.value] for k in RECORD_ATTRS if k.value in failures}
                raise LoadError(
                    "; ".join(f"{name}: {err.message}" for name, err in ordered.items()),
                    ordered,
                )

            for kind, attr in RECORD_ATTRS.items():
                setattr(self, attr, list(results[kind]))

    # ----------------------------
    # Navigation
    # ----------------------------
    def select_pet(self, pet: Pet) -> None:
        if self.navigator.current is not Screen.PET_DETAIL:
            self.navigator.go(Screen.PET_DETAIL)
        if self.selected_pet is None or self.selected_pet.id != pet.id:
            self._clear_records()
        self.selected_pet = pet
        self.load_records(pet.id)

    def back_to_dashboard(self) -> None:
        if self.navigator.current is not Screen.DASHBOARD:
            self.navigator.go(Screen.DASHBOARD)
        self.selected_pet = None
        self._clear_records()

    def open_add_pet(self) -> None:
        self.navigator.go(Screen.ADD_PET)

    def open_add_record(self, record_type) -> None:
        self._require_selected_pet()
        self.navigator.go(ADD_RECORD_SCREENS[RecordType.parse(record_type)])

    def cancel_add(self) -> None:
        if not self.navigator.form_open:
            raise NavigationError(f"No add form is open on {self.navigator.current.value}")
        self.navigator.back()

    # ----------------------------
    # Mutations
    # ----------------------------
    def add_pet(self, draft: PetDraft | dict) -> Pet:
        with self._request("Failed to save pet"):
            owner = self._require_user()
            pet = self.api.add_pet(_payload(draft, user_id=owner.id))
        self.pets.append(pet)
        self._close_form(Screen.ADD_PET)
        return pet

    def _add_record(self, kind: RecordType, draft) -> MedicalRecord:
        with self._request(f"Failed to save {RECORD_SINGULAR[kind.value]}"):
            pet = self._require_selected_pet()
            record = self.api.add_record(kind, _payload(draft, pet_id=pet.id))
        self.records(kind).append(record)
        self._close_form(ADD_RECORD_SCREENS[kind])
        return record

    def add_vaccine(self, draft: VaccineDraft | dict) -> Vaccine:
        return self._add_record(RecordType.VACCINES, draft)

    def add_allergy(self, draft: AllergyDraft | dict) -> Allergy:
        return self._add_record(RecordType.ALLERGIES, draft)

    def add_lab_record(self, draft: LabDraft | dict) -> LabRecord:
        return self._add_record(RecordType.LABS, draft)

    def delete_record(self, record_id: str, record_type) -> None:
        kind = RecordType.parse(record_type)
        with self._request("Failed to delete record"):
            self.api.delete_record(kind, record_id)
        attr = RECORD_ATTRS[kind]
        setattr(self, attr, [r for r in getattr(self, attr) if r.id != record_id])

    def delete_pet(self, pet_id: str) -> None:
        """
        Delete a pet.  When it is the selected pet, its records go too,
        matching the server's cascade without another fetch.
        """
        with self._request("Failed to delete pet"):
            self.api.delete_pet(pet_id)
        self.pets = [p for p in self.pets if p.id != pet_id]
        if self.selected_pet is not None and self.selected_pet.id == pet_id:
            self.selected_pet = None
            self._clear_records()
            self.navigator.reset(Screen.DASHBOARD)
