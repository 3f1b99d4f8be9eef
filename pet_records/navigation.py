from enum import Enum

from .domain import RecordType
from .errors import NavigationError


class Screen(str, Enum):
    REGISTRATION = "Registration"
    DASHBOARD = "Dashboard"
    PET_DETAIL = "PetDetail"
    ADD_PET = "AddPet"
    ADD_VACCINE = "AddVaccine"
    ADD_ALLERGY = "AddAllergy"
    ADD_LAB_RECORD = "AddLabRecord"


TRANSITIONS: dict[Screen, frozenset[Screen]] = {
    Screen.REGISTRATION: frozenset({Screen.DASHBOARD}),
    Screen.DASHBOARD: frozenset({Screen.PET_DETAIL, Screen.ADD_PET}),
    Screen.PET_DETAIL: frozenset({
        Screen.DASHBOARD,
        Screen.ADD_VACCINE,
        Screen.ADD_ALLERGY,
        Screen.ADD_LAB_RECORD,
    }),
    Screen.ADD_PET: frozenset({Screen.DASHBOARD}),
    Screen.ADD_VACCINE: frozenset({Screen.PET_DETAIL}),
    Screen.ADD_ALLERGY: frozenset({Screen.PET_DETAIL}),
    Screen.ADD_LAB_RECORD: frozenset({Screen.PET_DETAIL}),
}

# Where "back" (cancel, or a successful save) leads from each screen
CALLER: dict[Screen, Screen] = {
    Screen.PET_DETAIL: Screen.DASHBOARD,
    Screen.ADD_PET: Screen.DASHBOARD,
    Screen.ADD_VACCINE: Screen.PET_DETAIL,
    Screen.ADD_ALLERGY: Screen.PET_DETAIL,
    Screen.ADD_LAB_RECORD: Screen.PET_DETAIL,
}

ADD_RECORD_SCREENS: dict[RecordType, Screen] = {
    RecordType.VACCINES: Screen.ADD_VACCINE,
    RecordType.ALLERGIES: Screen.ADD_ALLERGY,
    RecordType.LABS: Screen.ADD_LAB_RECORD,
}

FORM_SCREENS = frozenset({Screen.ADD_PET, *ADD_RECORD_SCREENS.values()})


class Navigator:
    """
    Screen-level state machine.  Exactly one screen is current, so two add
    forms can never be open at the same time.
    """

    def __init__(self, logged_in: bool = False):
        self.current = Screen.DASHBOARD if logged_in else Screen.REGISTRATION

    def __repr__(self):
        return f"Navigator(current={self.current.value})"

    def can_go(self, screen: Screen) -> bool:
        return screen in TRANSITIONS[self.current]

    def go(self, screen: Screen) -> Screen:
        if not self.can_go(screen):
            raise NavigationError(
                f"Cannot navigate from {self.current.value} to {screen.value}"
            )
        self.current = screen
        return screen

    def back(self) -> Screen:
        caller = CALLER.get(self.current)
        if caller is None:
            raise NavigationError(f"{self.current.value} has no screen to return to")
        self.current = caller
        return caller

    def reset(self, screen: Screen) -> Screen:
        """Jump straight to ``screen`` (login, logout)."""
        self.current = screen
        return screen

    @property
    def form_open(self) -> bool:
        return self.current in FORM_SCREENS
