import os
import uuid
from typing import Any, Dict, Optional

from locust import HttpUser, between, task

API_PREFIX = os.getenv("API_PREFIX", "/api")
RUN_ID = os.getenv("LOAD_RUN_ID", str(uuid.uuid4())[:8])  # used in emails and pet names for later filtering
PET_TYPE = os.getenv("LOAD_PET_TYPE", "dog")

RECORD_BODIES = {
    "vaccines": {"name": "Rabies", "dateAdministered": "2024-01-15", "isScheduled": False},
    "allergies": {"name": "Chicken", "reactions": ["Hives"], "severity": "mild"},
    "labs": {"name": "Blood Work", "dosage": "2ml", "instructions": "Fasting"},
}


class PetRecordsLoadUser(HttpUser):
    """
    Locust user walking the pet-health flow against the REST API.
    Mix:
      - read traffic (pet list, record lists per type)
      - write traffic (add pet, add records, cascade-delete a pet)
    Each user registers its own account, so no state is shared between workers.
    """
    wait_time = between(0.1, 0.6)

    def on_start(self):
        self.user_id: Optional[str] = None
        self.pet_ids: list[str] = []
        self._get("/health", name="rest:Health")
        self._register()

    def _headers(self) -> Dict[str, str]:
        return {"X-Request-Id": str(uuid.uuid4())}

    def _call(self, method: str, path: str, name: str, ok=(200, 201), **kwargs) -> Optional[Dict[str, Any]]:
        """
        Wraps a REST call and marks failure if:
          - status not in ``ok``
          - JSON parse fails
        """
        with self.client.request(
            method,
            f"{API_PREFIX}{path}",
            headers=self._headers(),
            name=name,
            catch_response=True,
            **kwargs,
        ) as resp:
            if resp.status_code not in ok:
                resp.failure(f"HTTP {resp.status_code}: {resp.text[:200]}")
                return None

            try:
                data = resp.json()
            except ValueError:
                resp.failure(f"Non-JSON response: {resp.text[:200]}")
                return None

            resp.success()
            return data

    def _get(self, path: str, name: str, **kwargs):
        return self._call("GET", path, name, **kwargs)

    def _register(self):
        email = f"load_{RUN_ID}_{uuid.uuid4().hex[:8]}@example.com"
        data = self._call("POST", "/auth/register", "rest:Register", json={"email": email, "password": "load"})
        if data:
            self.user_id = data["user"]["id"]

    # ----------------------------
    # Reads
    # ----------------------------
    @task(30)
    def list_pets(self):
        if self.user_id:
            self._get("/pets", "rest:PetsList", params={"userId": self.user_id})

    @task(30)
    def list_records(self):
        if not self.pet_ids:
            return
        pet_id = self.pet_ids[-1]
        for route in RECORD_BODIES:
            self._get(f"/records/{pet_id}/{route}", f"rest:List[{route}]")

    # ----------------------------
    # Writes (concurrent state changes)
    # ----------------------------
    @task(15)
    def add_pet(self):
        if not self.user_id:
            return
        body = {
            "userId": self.user_id,
            "name": f"load_{RUN_ID}_{uuid.uuid4().hex[:8]}",
            "animalType": PET_TYPE,
            "breed": "Mixed",
            "dateOfBirth": "2020-01-01",
        }
        data = self._call("POST", "/pets", "rest:AddPet", json=body)
        if data:
            self.pet_ids.append(data["pet"]["id"])

    @task(20)
    def add_records(self):
        if not self.pet_ids:
            return
        pet_id = self.pet_ids[-1]
        for route, body in RECORD_BODIES.items():
            self._call("POST", f"/{route}", f"rest:Add[{route}]", json={"petId": pet_id, **body})

    @task(5)
    def delete_pet(self):
        """Cascade delete of the oldest pet this user created."""
        if not self.pet_ids:
            return
        pet_id = self.pet_ids.pop(0)
        self._call("DELETE", f"/pets/{pet_id}", "rest:DeletePet")
        for route in RECORD_BODIES:
            data = self._get(f"/records/{pet_id}/{route}", f"rest:AfterDelete[{route}]")
            if data is not None and data.get(route):
                self.environment.events.request.fire(
                    request_type="CHECK",
                    name="rest:CascadeLeftovers",
                    response_time=0,
                    response_length=0,
                    exception=AssertionError(f"{route} left behind for {pet_id}"),
                )


"""How to run

SEED_DATA=false python3 -m pet_records.app &

python3 -m locust -f load/locustfile.py \
  --headless \
  -u 25 \
  -r 5 \
  --run-time 30s \
  --host http://127.0.0.1:3001 \
  --csv load/locust_results

"""


"""
Locust load profile for the pet health records API.

What this test validates:
- Performance under sustained traffic (read-heavy with steady writes).
- Error rate stays low (any unexpected status counts as a failure).
- Cascade delete holds under concurrency: after a pet is deleted no record
  list for it may come back non-empty.

Notes:
- We send X-Request-Id so load traffic can be matched to the API's JSON log lines.
"""
