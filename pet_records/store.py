import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Any

from .domain import (
    RECORD_CLASSES,
    RECORD_SINGULAR,
    REQUIRED_PET_FIELDS,
    REQUIRED_RECORD_FIELDS,
    TEXT_RECORD_FIELDS,
    AnimalType,
    MedicalRecord,
    Pet,
    RecordType,
    Severity,
    User,
)
from .errors import AuthError, ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _missing(payload: dict, required: tuple[str, ...]) -> list[str]:
    if not isinstance(payload, dict):
        raise ValidationError("Expected a JSON object")
    # isScheduled=False is a real value, so only None/"" count as absent
    return [k for k in required if payload.get(k) is None or payload.get(k) == ""]


def _check_strings(payload: dict, keys) -> None:
    wrong = [k for k in keys if not isinstance(payload[k], str)]
    if wrong:
        raise ValidationError(f"Fields must be strings: {', '.join(wrong)}")


def _check_credentials(email, password) -> None:
    if not email or not password:
        raise ValidationError("Email and password are required")
    if not isinstance(email, str) or not isinstance(password, str):
        raise ValidationError("Email and password must be strings")


class RecordStore:
    """
    In-memory home of users, pets and the three medical record collections.

    Every instance owns its collections, so tests and mock clients can run
    side by side.  Mutations happen under one lock; ``delete_pet`` removes
    the pet and all of its records inside a single critical section.
    """

    def __init__(self):
        self.users: list[User] = []
        self.pets: list[Pet] = []
        self.records: dict[RecordType, list] = {t: [] for t in RecordType}
        self._lock = threading.RLock()
        self._counter = itertools.count(1)

    # ----------------------------
    # Helpers
    # ----------------------------
    def _next_id(self, prefix: str, existing: list) -> str:
        """Monotonic "<prefix>-<n>"; never reuses an id, skips seeded ones."""
        taken = {x.id for x in existing}
        while True:
            candidate = f"{prefix}-{next(self._counter)}"
            if candidate not in taken:
                return candidate

    def _find_user_by_email(self, email: str) -> User | None:
        return next((u for u in self.users if u.email == email), None)

    def _find_pet(self, pet_id: str) -> Pet | None:
        return next((p for p in self.pets if p.id == pet_id), None)

    # ----------------------------
    # Users
    # ----------------------------
    def register_user(self, email: str | None, password: str | None) -> User:
        _check_credentials(email, password)

        with self._lock:
            if self._find_user_by_email(email):
                raise ConflictError("User already exists")

            local_part = email.split("@")[0]
            user = User(
                id=self._next_id("user", self.users),
                email=email,
                first_name=local_part[:1].upper() + local_part[1:],
                last_name="User",
                created_at=_now(),
            )
            self.users.append(user)

        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: str | None, password: str | None) -> User:
        _check_credentials(email, password)

        user = self._find_user_by_email(email)
        if user is None:
            raise AuthError("Invalid credentials")
        return user

    # ----------------------------
    # Pets
    # ----------------------------
    def list_pets(self, user_id: str | None) -> list[Pet]:
        if not user_id:
            raise ValidationError("User ID is required")
        with self._lock:
            return [p for p in self.pets if p.user_id == user_id]

    def add_pet(self, payload: dict[str, Any]) -> Pet:
        payload = payload or {}
        missing = _missing(payload, REQUIRED_PET_FIELDS)
        if missing:
            raise ValidationError(f"All pet fields are required (missing: {', '.join(missing)})")
        _check_strings(payload, REQUIRED_PET_FIELDS)

        animal_type = payload["animalType"]
        if animal_type not in {t.value for t in AnimalType}:
            raise ValidationError(
                f"Invalid animalType '{animal_type}'. Valid types are {', '.join(t.value for t in AnimalType)}"
            )

        with self._lock:
            if not any(u.id == payload["userId"] for u in self.users):
                raise NotFoundError(f"User with ID {payload['userId']} not found")

            pet = Pet(
                id=self._next_id("pet", self.pets),
                user_id=payload["userId"],
                name=payload["name"],
                animal_type=animal_type,
                breed=payload["breed"],
                date_of_birth=payload["dateOfBirth"],
                created_at=_now(),
            )
            self.pets.append(pet)

        logger.info("Added pet %s for user %s", pet.id, pet.user_id)
        return pet

    def delete_pet(self, pet_id: str) -> dict[RecordType, int]:
        """
        Cascade delete: the pet and every record pointing at it disappear
        together.  Returns how many records of each type were removed.
        """
        with self._lock:
            pet = self._find_pet(pet_id)
            if pet is None:
                raise NotFoundError("Pet not found")

            removed = {}
            for record_type, items in self.records.items():
                before = len(items)
                items[:] = [r for r in items if r.pet_id != pet_id]
                removed[record_type] = before - len(items)
            self.pets.remove(pet)

        logger.info(
            "Deleted pet %s with %s",
            pet_id,
            ", ".join(f"{n} {t.value}" for t, n in removed.items()),
        )
        return removed

    # ----------------------------
    # Medical records
    # ----------------------------
    def list_records(self, pet_id: str, record_type) -> list:
        record_type = RecordType.parse(record_type)
        with self._lock:
            return [r for r in self.records[record_type] if r.pet_id == pet_id]

    def add_record(self, record_type, payload: dict[str, Any]) -> MedicalRecord:
        record_type = RecordType.parse(record_type)
        payload = payload or {}

        missing = _missing(payload, REQUIRED_RECORD_FIELDS[record_type])
        if missing:
            raise ValidationError(
                f"All {record_type.value} fields are required (missing: {', '.join(missing)})"
            )
        _check_strings(payload, TEXT_RECORD_FIELDS[record_type])
        self._check_record_fields(record_type, payload)

        cls = RECORD_CLASSES[record_type]
        with self._lock:
            if self._find_pet(payload["petId"]) is None:
                raise NotFoundError(f"Pet with ID {payload['petId']} not found")

            items = self.records[record_type]
            data = {k: payload[k] for k in REQUIRED_RECORD_FIELDS[record_type]}
            data["id"] = self._next_id(RECORD_SINGULAR[record_type.value], items)
            data["createdAt"] = _now()
            if record_type is RecordType.ALLERGIES:
                data["reactions"] = list(data["reactions"])

            record = cls.from_dict(data)
            items.append(record)

        logger.info("Added %s %s for pet %s", record_type.value, record.id, record.pet_id)
        return record

    @staticmethod
    def _check_record_fields(record_type: RecordType, payload: dict) -> None:
        if record_type is RecordType.VACCINES:
            if not isinstance(payload["isScheduled"], bool):
                raise ValidationError("isScheduled must be a boolean")
        elif record_type is RecordType.ALLERGIES:
            reactions = payload["reactions"]
            if (
                not isinstance(reactions, list)
                or not reactions
                or not all(isinstance(r, str) and r for r in reactions)
            ):
                raise ValidationError("reactions must be a non-empty list of strings")
            if payload["severity"] not in {s.value for s in Severity}:
                raise ValidationError(
                    f"Invalid severity '{payload['severity']}'. Valid values are {', '.join(s.value for s in Severity)}"
                )

    def delete_record(self, record_type, record_id: str) -> None:
        record_type = RecordType.parse(record_type)
        label = RECORD_SINGULAR[record_type.value].capitalize()
        with self._lock:
            items = self.records[record_type]
            record = next((r for r in items if r.id == record_id), None)
            if record is None:
                raise NotFoundError(f"{label} not found")
            items.remove(record)
        logger.info("Deleted %s %s", record_type.value, record_id)

    # ----------------------------
    # Dataset loading
    # ----------------------------
    def seed(self, dataset: dict[str, list[dict]]) -> None:
        """
        Load a fixed dataset shaped like ``load_data.load_mock_dataset()``:
        {"users": [...], "pets": [...], "vaccines": [...], "allergies": [...], "labs": [...]}
        with camelCase items that already carry ids and timestamps.
        """
        with self._lock:
            self.users.extend(User.from_dict(u) for u in dataset.get("users", []))
            self.pets.extend(Pet.from_dict(p) for p in dataset.get("pets", []))
            for record_type, cls in RECORD_CLASSES.items():
                self.records[record_type].extend(
                    cls.from_dict(r) for r in dataset.get(record_type.value, [])
                )
        logger.info("Seeded store: %s", self.counts())

    def counts(self) -> dict[str, int]:
        with self._lock:
            out = {"users": len(self.users), "pets": len(self.pets)}
            out.update({t.value: len(items) for t, items in self.records.items()})
            return out
