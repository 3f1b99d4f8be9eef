from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar

from .errors import ValidationError


class AnimalType(str, Enum):
    dog = "dog"
    cat = "cat"
    bird = "bird"


class Severity(str, Enum):
    mild = "mild"
    severe = "severe"


class RecordType(str, Enum):
    VACCINES = "vaccines"
    ALLERGIES = "allergies"
    LABS = "labs"

    @classmethod
    def parse(cls, value) -> "RecordType":
        """Accepts an enum member, its value, or the "medications" alias for labs."""
        if isinstance(value, cls):
            return value
        if value == "medications":
            return cls.LABS
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Invalid record type '{value}'") from None


# Route name -> key used for a single record in request/response bodies
RECORD_SINGULAR = {
    "vaccines": "vaccine",
    "allergies": "allergy",
    "labs": "lab",
    "medications": "medication",
}


def wire_name(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class WireModel:
    """camelCase JSON <-> snake_case dataclass conversion shared by every entity."""

    def to_dict(self) -> dict[str, Any]:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[wire_name(f.name)] = list(value) if isinstance(value, list) else value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        return cls(**{f.name: data[wire_name(f.name)] for f in fields(cls)})


@dataclass
class User(WireModel):
    id: str
    email: str
    first_name: str
    last_name: str
    created_at: str


@dataclass
class Pet(WireModel):
    id: str
    user_id: str
    name: str
    animal_type: str
    breed: str
    date_of_birth: str
    created_at: str


@dataclass
class Vaccine(WireModel):
    record_type: ClassVar[RecordType] = RecordType.VACCINES

    id: str
    pet_id: str
    name: str
    date_administered: str
    is_scheduled: bool
    created_at: str


@dataclass
class Allergy(WireModel):
    record_type: ClassVar[RecordType] = RecordType.ALLERGIES

    id: str
    pet_id: str
    name: str
    reactions: list[str]
    severity: str
    created_at: str


@dataclass
class LabRecord(WireModel):
    record_type: ClassVar[RecordType] = RecordType.LABS

    id: str
    pet_id: str
    name: str
    dosage: str
    instructions: str
    created_at: str


MedicalRecord = Vaccine | Allergy | LabRecord

RECORD_CLASSES: dict[RecordType, type] = {
    RecordType.VACCINES: Vaccine,
    RecordType.ALLERGIES: Allergy,
    RecordType.LABS: LabRecord,
}

# Fields a create request must carry, per record type (wire names)
REQUIRED_RECORD_FIELDS: dict[RecordType, tuple[str, ...]] = {
    RecordType.VACCINES: ("petId", "name", "dateAdministered", "isScheduled"),
    RecordType.ALLERGIES: ("petId", "name", "reactions", "severity"),
    RecordType.LABS: ("petId", "name", "dosage", "instructions"),
}

# Required fields that must be JSON strings
TEXT_RECORD_FIELDS: dict[RecordType, tuple[str, ...]] = {
    RecordType.VACCINES: ("petId", "name", "dateAdministered"),
    RecordType.ALLERGIES: ("petId", "name", "severity"),
    RecordType.LABS: ("petId", "name", "dosage", "instructions"),
}

REQUIRED_PET_FIELDS = ("userId", "name", "animalType", "breed", "dateOfBirth")


# ----------------------------
# Form drafts (what a screen hands to the client store)
# ----------------------------
class Draft(WireModel):
    def to_payload(self, **owner) -> dict[str, Any]:
        payload = {wire_name(k): v for k, v in owner.items()}
        payload.update(self.to_dict())
        return payload


@dataclass
class PetDraft(Draft):
    name: str
    animal_type: str
    breed: str
    date_of_birth: str


@dataclass
class VaccineDraft(Draft):
    record_type: ClassVar[RecordType] = RecordType.VACCINES

    name: str
    date_administered: str
    is_scheduled: bool = False


@dataclass
class AllergyDraft(Draft):
    record_type: ClassVar[RecordType] = RecordType.ALLERGIES

    name: str
    reactions: list[str] = field(default_factory=list)
    severity: str = Severity.mild.value


@dataclass
class LabDraft(Draft):
    record_type: ClassVar[RecordType] = RecordType.LABS

    name: str
    dosage: str
    instructions: str
