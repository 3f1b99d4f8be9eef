import uuid


def unique_email() -> str:
    return f"owner-{uuid.uuid4().hex[:8]}@example.com"


def pet_payload(user_id: str, **overrides) -> dict:
    payload = {
        "userId": user_id,
        "name": f"Pet-{uuid.uuid4().hex[:6]}",
        "animalType": "dog",
        "breed": "Labrador",
        "dateOfBirth": "2020-01-01",
    }
    payload.update(overrides)
    return payload


def record_payload(route: str, pet_id: str) -> dict:
    """A valid create body for the given record route."""
    if route == "vaccines":
        return {"petId": pet_id, "name": "Rabies", "dateAdministered": "2024-01-01", "isScheduled": False}
    if route == "allergies":
        return {"petId": pet_id, "name": "Chicken", "reactions": ["Hives", "Itching"], "severity": "mild"}
    return {"petId": pet_id, "name": "Carprofen", "dosage": "25mg", "instructions": "Twice daily with food"}
