import logging
from datetime import datetime, timezone

from flask import Flask, jsonify, request
from flask_restx import Api, Namespace, Resource, fields, marshal

from .config import settings
from .domain import RECORD_SINGULAR, AnimalType, RecordType, Severity
from .errors import PetRecordsError, ValidationError
from .load_data import load_mock_dataset
from .logging_helper import (
    current_request_id,
    log_event,
    log_status,
    setup_logging,
    setup_request_logging,
)
from .models import Models
from .store import RecordStore

# Enums
ANIMAL_TYPE = [t.value for t in AnimalType]
SEVERITY = [s.value for s in Severity]

# Route names served under /<name>; "medications" is an alias of labs
RECORD_ROUTES = ["vaccines", "allergies", "labs", "medications"]


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Expected a JSON object")
    return payload


class StoreResource(Resource):
    """Resource bound to one RecordStore (set per app by the factory)."""
    STORE: RecordStore = None


def register_record_resource(api, store, models, *, route_name):
    """
    Registers, for one record route (e.g. "vaccines"):
      POST    /<route_name>
      DELETE  /<route_name>/<record_id>
    """
    record_type = RecordType.parse(route_name)
    singular = RECORD_SINGULAR[route_name]
    label = singular.capitalize()

    ns = Namespace(route_name, description=f"{label} records")
    envelope = api.model(f'{label}Envelope', {
        singular: fields.Nested(models.record_models[record_type]),
    })

    @ns.route('')
    @ns.response(400, 'Missing or invalid field')
    @ns.response(404, 'Pet not found')
    class _CreateResource(StoreResource):
        STORE = store

        @ns.doc(f'create_{singular}')
        @ns.expect(models.record_input_models[record_type])
        @ns.marshal_with(envelope, code=201)
        def post(self):
            record = self.STORE.add_record(record_type, _json_body())
            return {singular: record}, 201

    @ns.route('/<string:record_id>')
    @ns.response(404, f'{label} not found')
    @ns.param('record_id', f'The {singular} identifier')
    class _ItemResource(StoreResource):
        STORE = store

        @ns.doc(f'delete_{singular}')
        @ns.marshal_with(models.message_model)
        def delete(self, record_id):
            self.STORE.delete_record(record_type, record_id)
            return {"message": f"{label} deleted successfully"}

    api.add_namespace(ns)
    return ns


def create_app(store: RecordStore | None = None, app_settings=None) -> Flask:
    """
    Build a fresh Flask app around ``store``.

    Each call gets its own Api, namespaces and store, so several apps can
    live in one process (tests create one per test).
    """
    app_settings = app_settings or settings
    setup_logging(app_settings.log_level)

    if store is None:
        store = RecordStore()
        if app_settings.seed_data:
            store.seed(load_mock_dataset())

    prefix = app_settings.api_prefix.rstrip("/")

    app = Flask(__name__)
    app.config["RESTX_ERROR_404_HELP"] = False
    app.extensions["record_store"] = store
    setup_request_logging(app, app_settings)

    api = Api(app, version=app_settings.api_version, title=app_settings.project_name,
              description='In-memory pet health records API', prefix=prefix, doc=f"{prefix}/docs")

    models = Models(api, ANIMAL_TYPE, SEVERITY)

    @api.errorhandler(PetRecordsError)
    def handle_record_error(error):
        log_event(
            "http_error",
            level=logging.WARNING,
            request_id=current_request_id(),
            method=request.method,
            path=request.path,
            status=error.code,
            error=type(error).__name__,
            message=error.message,
        )
        return {"message": error.message}, error.code

    '''
    Auth Namespace
    '''
    auth_ns = Namespace("auth", description="Registration and login")

    @auth_ns.route('/register')
    @auth_ns.response(400, 'Email and password are required')
    @auth_ns.response(409, 'User already exists')
    class Register(StoreResource):
        STORE = store

        @auth_ns.doc('register_user')
        @auth_ns.expect(models.credentials_model)
        @auth_ns.marshal_with(models.user_envelope, code=201)
        def post(self):
            payload = _json_body()
            user = self.STORE.register_user(payload.get("email"), payload.get("password"))
            return {"user": user}, 201

    @auth_ns.route('/login')
    @auth_ns.response(400, 'Email and password are required')
    @auth_ns.response(401, 'Invalid credentials')
    class Login(StoreResource):
        STORE = store

        @auth_ns.doc('login_user')
        @auth_ns.expect(models.credentials_model)
        @auth_ns.marshal_with(models.user_envelope)
        def post(self):
            payload = _json_body()
            return {"user": self.STORE.login(payload.get("email"), payload.get("password"))}

    '''
    Pets Namespace
    '''
    pets_ns = Namespace("pets", description="Pets info")

    @pets_ns.route('')
    class PetList(StoreResource):
        STORE = store

        @pets_ns.doc('list_pets', params={'userId': 'Owner whose pets to list'})
        @pets_ns.response(400, 'User ID is required')
        @pets_ns.marshal_with(models.pets_envelope)
        def get(self):
            return {"pets": self.STORE.list_pets(request.args.get("userId"))}

        @pets_ns.doc('create_pet')
        @pets_ns.response(400, 'All pet fields are required')
        @pets_ns.response(404, 'User not found')
        @pets_ns.expect(models.pet_input_model)
        @pets_ns.marshal_with(models.pet_envelope, code=201)
        def post(self):
            return {"pet": self.STORE.add_pet(_json_body())}, 201

    @pets_ns.route('/<string:pet_id>')
    @pets_ns.response(404, 'Pet not found')
    @pets_ns.param('pet_id', 'The pet identifier')
    class PetItem(StoreResource):
        STORE = store

        @pets_ns.doc('delete_pet')
        @pets_ns.marshal_with(models.message_model)
        def delete(self, pet_id):
            """Delete a pet together with all of its medical records"""
            self.STORE.delete_pet(pet_id)
            return {"message": "Pet deleted successfully"}

    '''
    Records Namespace
    '''
    records_ns = Namespace("records", description="Medical records per pet")

    @records_ns.route('/<string:pet_id>/<string:record_type>')
    @records_ns.response(400, 'Invalid record type')
    @records_ns.param('record_type', 'vaccines, allergies, labs or medications')
    class PetRecords(StoreResource):
        STORE = store

        @records_ns.doc('list_records')
        def get(self, pet_id, record_type):
            kind = RecordType.parse(record_type)
            items = self.STORE.list_records(pet_id, kind)
            # keyed by the name the caller asked for ("medications" stays "medications")
            return {record_type: marshal(items, models.record_models[kind])}, 200

    for ns in (auth_ns, pets_ns, records_ns):
        api.add_namespace(ns)

    for route_name in RECORD_ROUTES:
        register_record_resource(api, store, models, route_name=route_name)

    @app.route(f'{prefix}/health')
    def health_check():
        """Health check endpoint for monitoring and client base-URL probing"""
        return jsonify({
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }), 200

    return app


def main():
    app = create_app()
    store = app.extensions["record_store"]
    log_status("good", f"Pet Health Records API running on http://{settings.host}:{settings.port}{settings.api_prefix}")
    log_status("info", f"Health check: http://{settings.host}:{settings.port}{settings.api_prefix}/health")
    log_status("info", "Store loaded: ", str(store.counts()))
    app.run(host=settings.host, port=settings.port, debug=not settings.testing)


if __name__ == '__main__':
    main()
