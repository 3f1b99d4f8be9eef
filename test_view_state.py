import pytest
from hamcrest import assert_that, contains_exactly, empty, has_length, is_

from pet_records.domain import AllergyDraft, LabDraft, PetDraft, RecordType, VaccineDraft
from pet_records.errors import (
    AuthError,
    ConflictError,
    LoadError,
    NavigationError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from pet_records.mock_api import MockApi
from pet_records.navigation import Screen
from pet_records.view_state import PetHealthStore

DEV_EMAIL = "dev@petrecords.local"


class FlakyApi(MockApi):
    """MockApi whose record/pet reads fail for the kinds listed in ``failing``."""

    def __init__(self):
        super().__init__()
        self.failing = set()

    def get_pets(self, user_id):
        if "pets" in self.failing:
            raise NetworkError("connection reset")
        return super().get_pets(user_id)

    def get_records(self, pet_id, record_type):
        kind = RecordType.parse(record_type)
        if kind.value in self.failing:
            raise NetworkError(f"{kind.value} timed out")
        return super().get_records(pet_id, kind)


# -----------------------------
# Fixtures
# -----------------------------
@pytest.fixture
def api():
    return FlakyApi()


@pytest.fixture
def state(api):
    s = PetHealthStore(api)
    s.login(DEV_EMAIL, "anything")
    return s


@pytest.fixture
def buddy(state):
    pet = next(p for p in state.pets if p.id == "pet-1")
    state.select_pet(pet)
    return pet


# -----------------------------
# Session
# -----------------------------
def test_starts_on_registration_when_logged_out(api):
    s = PetHealthStore(api)
    assert s.screen is Screen.REGISTRATION
    assert s.user is None


def test_login_loads_pets_and_lands_on_dashboard(state):
    assert state.screen is Screen.DASHBOARD
    assert state.user.id == "dev-user-1"
    assert_that([p.name for p in state.pets], contains_exactly("Buddy", "Whiskers"))
    assert state.error is None
    assert state.loading is False


def test_login_unknown_email_sets_error(api):
    s = PetHealthStore(api)
    with pytest.raises(AuthError):
        s.login("stranger@example.com", "secret")

    assert s.error == "Login failed: Invalid credentials"
    assert s.screen is Screen.REGISTRATION
    assert s.user is None


def test_register_starts_with_no_pets(api):
    s = PetHealthStore(api)
    user = s.register("a@b.com", "secret")

    assert user.first_name == "A"
    assert s.screen is Screen.DASHBOARD
    assert_that(s.pets, is_(empty()))


def test_register_duplicate_sets_error(api):
    s = PetHealthStore(api)
    with pytest.raises(ConflictError):
        s.register(DEV_EMAIL, "secret")
    assert s.error == "Registration failed: User already exists"


def test_local_edits_do_not_reach_the_backend(state, api, buddy):
    state.pets[0].name = "Mutated"
    state.vaccines[0].name = "Mutated"
    state.allergies[0].reactions.clear()

    assert api.store.pets[0].name == "Buddy"
    assert api.store.records[RecordType.VACCINES][0].name == "Rabies"
    assert api.store.records[RecordType.ALLERGIES][0].reactions == ["Hives", "Itching"]


def test_logout_clears_everything(state, buddy):
    state.logout()

    assert state.user is None
    assert state.selected_pet is None
    assert state.screen is Screen.REGISTRATION
    assert state.pets == [] and state.vaccines == [] and state.allergies == [] and state.labs == []


# -----------------------------
# Loading
# -----------------------------
def test_load_pets_failure_keeps_previous_pets(state, api):
    before = list(state.pets)
    api.failing.add("pets")

    with pytest.raises(LoadError) as exc:
        state.load_pets()

    assert list(exc.value.causes) == ["pets"]
    assert state.pets == before
    assert state.error.startswith("Failed to load pets")


def test_select_pet_loads_all_three_record_types(state, buddy):
    assert state.screen is Screen.PET_DETAIL
    assert state.selected_pet is buddy
    assert_that([v.name for v in state.vaccines], contains_exactly("Rabies", "DHPP"))
    assert_that([a.name for a in state.allergies], contains_exactly("Chicken"))
    assert_that([r.name for r in state.labs], contains_exactly("Blood Work"))


def test_load_records_is_all_or_nothing(state, api, buddy):
    # server gains a vaccine the client has not seen yet
    api.add_record("vaccines", {
        "petId": buddy.id, "name": "Lepto", "dateAdministered": "2025-01-01", "isScheduled": True,
    })
    api.failing.add("allergies")
    before = (list(state.vaccines), list(state.allergies), list(state.labs))

    with pytest.raises(LoadError) as exc:
        state.load_records()

    assert list(exc.value.causes) == ["allergies"]
    assert isinstance(exc.value.causes["allergies"], NetworkError)
    assert (state.vaccines, state.allergies, state.labs) == before
    assert state.error.startswith("Failed to load medical records")
    assert state.loading is False


def test_load_records_reports_every_failed_type(state, api, buddy):
    api.failing.update({"labs", "vaccines"})

    with pytest.raises(LoadError) as exc:
        state.load_records()

    assert list(exc.value.causes) == ["vaccines", "labs"]
    assert "vaccines timed out" in exc.value.message
    assert "labs timed out" in exc.value.message


def test_load_records_after_recovery_applies_fresh_data(state, api, buddy):
    api.failing.add("labs")
    with pytest.raises(LoadError):
        state.load_records()

    api.failing.clear()
    state.load_records()
    assert state.error is None
    assert_that(state.labs, has_length(1))


def test_selecting_another_pet_drops_previous_records(state, buddy):
    whiskers = next(p for p in state.pets if p.id == "pet-2")
    state.select_pet(whiskers)

    assert state.selected_pet is whiskers
    assert state.vaccines == [] and state.allergies == [] and state.labs == []


def test_back_to_dashboard_clears_selection(state, buddy):
    state.back_to_dashboard()
    assert state.screen is Screen.DASHBOARD
    assert state.selected_pet is None
    assert state.vaccines == []


# -----------------------------
# Mutations
# -----------------------------
def test_add_pet_appends_and_closes_form(state, api):
    state.open_add_pet()
    assert state.screen is Screen.ADD_PET

    pet = state.add_pet(PetDraft(name="Rex", animal_type="dog", breed="Lab", date_of_birth="2021-06-01"))

    assert pet.user_id == "dev-user-1"
    assert state.pets[-1] is pet
    assert state.screen is Screen.DASHBOARD
    assert len(api.get_pets("dev-user-1")) == 3


def test_add_pet_invalid_keeps_form_open(state):
    state.open_add_pet()
    with pytest.raises(ValidationError):
        state.add_pet({"name": "Rex", "animalType": "rabbit", "breed": "Lop", "dateOfBirth": "2021-06-01"})

    assert state.screen is Screen.ADD_PET
    assert state.error.startswith("Failed to save pet: Invalid animalType")
    assert_that(state.pets, has_length(2))


def test_add_pet_requires_login(api):
    s = PetHealthStore(api)
    with pytest.raises(ValidationError):
        s.add_pet(PetDraft(name="Rex", animal_type="dog", breed="Lab", date_of_birth="2021-06-01"))
    assert s.error == "Failed to save pet: Not logged in"


@pytest.mark.parametrize("kind, draft, attr, screen", [
    ("vaccines", VaccineDraft(name="Lepto", date_administered="2025-01-01"), "vaccines", Screen.ADD_VACCINE),
    ("allergies", AllergyDraft(name="Beef", reactions=["Vomiting"]), "allergies", Screen.ADD_ALLERGY),
    ("labs", LabDraft(name="Urinalysis", dosage="n/a", instructions="Fasting"), "labs", Screen.ADD_LAB_RECORD),
])
def test_add_record_appends_and_returns_to_detail(state, buddy, kind, draft, attr, screen):
    count = len(getattr(state, attr))
    state.open_add_record(kind)
    assert state.screen is screen

    add = {"vaccines": state.add_vaccine, "allergies": state.add_allergy, "labs": state.add_lab_record}[kind]
    record = add(draft)

    assert record.pet_id == buddy.id
    assert getattr(state, attr)[-1] == record
    assert len(getattr(state, attr)) == count + 1
    assert state.screen is Screen.PET_DETAIL


def test_scheduled_flag_defaults_to_false(state, buddy):
    vaccine = state.add_vaccine(VaccineDraft(name="Lepto", date_administered="2025-01-01"))
    assert vaccine.is_scheduled is False


def test_add_allergy_without_reactions_fails(state, buddy):
    state.open_add_record("allergies")
    with pytest.raises(ValidationError):
        state.add_allergy(AllergyDraft(name="Beef"))

    assert state.screen is Screen.ADD_ALLERGY
    assert state.error.startswith("Failed to save allergy")
    assert_that(state.allergies, has_length(1))


def test_delete_record_removes_locally_and_remotely(state, api, buddy):
    target = state.vaccines[0]
    state.delete_record(target.id, "vaccines")

    assert target.id not in [v.id for v in state.vaccines]
    assert target.id not in [v.id for v in api.get_records(buddy.id, "vaccines")]


def test_delete_unknown_record_keeps_list(state, buddy):
    before = list(state.vaccines)
    with pytest.raises(NotFoundError):
        state.delete_record("vaccine-missing", "vaccines")

    assert state.vaccines == before
    assert state.error == "Failed to delete record: Vaccine not found"


def test_delete_selected_pet_clears_selection_and_records(state, api, buddy):
    state.delete_pet(buddy.id)

    assert state.selected_pet is None
    assert state.vaccines == [] and state.allergies == [] and state.labs == []
    assert state.screen is Screen.DASHBOARD
    assert buddy.id not in [p.id for p in state.pets]
    for kind in RecordType:
        assert api.get_records(buddy.id, kind) == []


def test_delete_other_pet_keeps_selection(state, buddy):
    state.delete_pet("pet-2")

    assert state.selected_pet is buddy
    assert_that(state.vaccines, has_length(2))
    assert [p.id for p in state.pets] == ["pet-1"]


# -----------------------------
# Navigation guards
# -----------------------------
def test_only_one_add_form_at_a_time(state, buddy):
    state.open_add_record("vaccines")
    with pytest.raises(NavigationError):
        state.open_add_record("allergies")
    assert state.screen is Screen.ADD_VACCINE


def test_cancel_add_returns_to_caller(state, buddy):
    state.open_add_record("labs")
    state.cancel_add()
    assert state.screen is Screen.PET_DETAIL

    with pytest.raises(NavigationError):
        state.cancel_add()


def test_open_add_record_requires_selected_pet(state):
    with pytest.raises(ValidationError):
        state.open_add_record("vaccines")
    assert state.screen is Screen.DASHBOARD
