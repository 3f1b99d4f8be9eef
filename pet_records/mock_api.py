"""
In-process stand-in for ``ApiClient`` used during development.

Same method names and the same error classes as the HTTP client, backed by a
private RecordStore seeded from ``pet_records/data``.  ``reset()`` puts the
fixed dataset back.
"""

import time

from .domain import Pet, User
from .load_data import DATA_DIR, load_mock_dataset
from .store import RecordStore

DEV_USER_ID = "dev-user-1"


def _detached(entity):
    """Fresh copy through the wire form, like ApiClient gets from a response body."""
    return type(entity).from_dict(entity.to_dict())


class MockApi:
    def __init__(self, data_dir=DATA_DIR, delay: float = 0.0):
        self.data_dir = data_dir
        # seconds to sleep per call, to mimic network latency in demos
        self.delay = delay
        self.reset()

    def reset(self) -> None:
        self.store = RecordStore()
        self.store.seed(load_mock_dataset(self.data_dir))

    def _wait(self):
        if self.delay:
            time.sleep(self.delay)

    def dev_user(self) -> User:
        return _detached(next(u for u in self.store.users if u.id == DEV_USER_ID))

    def health(self) -> dict:
        return {"status": "OK", "timestamp": "mock"}

    def register(self, email: str, password: str) -> User:
        self._wait()
        return _detached(self.store.register_user(email, password))

    def login(self, email: str, password: str) -> User:
        self._wait()
        return _detached(self.store.login(email, password))

    def get_pets(self, user_id: str) -> list[Pet]:
        self._wait()
        return [_detached(p) for p in self.store.list_pets(user_id)]

    def add_pet(self, payload: dict) -> Pet:
        self._wait()
        return _detached(self.store.add_pet(payload))

    def delete_pet(self, pet_id: str) -> dict:
        self._wait()
        self.store.delete_pet(pet_id)
        return {"message": "Pet deleted successfully"}

    def get_records(self, pet_id: str, record_type) -> list:
        self._wait()
        return [_detached(r) for r in self.store.list_records(pet_id, record_type)]

    def add_record(self, record_type, payload: dict):
        self._wait()
        return _detached(self.store.add_record(record_type, payload))

    def delete_record(self, record_type, record_id: str) -> dict:
        self._wait()
        self.store.delete_record(record_type, record_id)
        return {"message": "Record deleted successfully"}
