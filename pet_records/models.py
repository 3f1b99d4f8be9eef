from flask_restx import fields

from .domain import RecordType


class Models:
    """
    flask-restx models for one Api instance.

    Output models read snake_case attributes off the domain dataclasses and
    publish them under their camelCase wire names.
    """

    def __init__(self, api, ANIMAL_TYPE, SEVERITY):
        self.api = api

        # ----------------------------
        # Auth
        # ----------------------------
        self.credentials_model = api.model('Credentials', {
            'email': fields.String(required=True, description='Account email'),
            'password': fields.String(required=True, description='Account password (presence only)'),
        })

        self.user_model = api.model('User', {
            'id': fields.String(readonly=True, description='The user ID'),
            'email': fields.String(required=True, description='Unique email'),
            'firstName': fields.String(attribute='first_name', description='Derived from the email'),
            'lastName': fields.String(attribute='last_name'),
            'createdAt': fields.String(attribute='created_at', readonly=True),
        })

        self.user_envelope = api.model('UserEnvelope', {
            'user': fields.Nested(self.user_model),
        })

        # ----------------------------
        # Pets
        # ----------------------------
        self.pet_input_model = api.model('PetInput', {
            'userId': fields.String(required=True, description='Owning user ID'),
            'name': fields.String(required=True, description='The pet name'),
            'animalType': fields.String(required=True, description='The pet species', enum=ANIMAL_TYPE),
            'breed': fields.String(required=True, description='Free text breed'),
            'dateOfBirth': fields.String(required=True, description='Date of birth (YYYY-MM-DD)'),
        })

        self.pet_model = api.model('Pet', {
            'id': fields.String(readonly=True, description='The pet ID'),
            'userId': fields.String(attribute='user_id'),
            'name': fields.String(),
            'animalType': fields.String(attribute='animal_type', enum=ANIMAL_TYPE),
            'breed': fields.String(),
            'dateOfBirth': fields.String(attribute='date_of_birth'),
            'createdAt': fields.String(attribute='created_at', readonly=True),
        })

        self.pet_envelope = api.model('PetEnvelope', {
            'pet': fields.Nested(self.pet_model),
        })

        self.pets_envelope = api.model('PetList', {
            'pets': fields.List(fields.Nested(self.pet_model)),
        })

        # ----------------------------
        # Medical records
        # ----------------------------
        self.vaccine_input_model = api.model('VaccineInput', {
            'petId': fields.String(required=True, description='Owning pet ID'),
            'name': fields.String(required=True, description='Vaccine name'),
            'dateAdministered': fields.String(required=True, description='Given or scheduled date'),
            'isScheduled': fields.Boolean(required=True, description='True for a future appointment'),
        })

        self.vaccine_model = api.model('Vaccine', {
            'id': fields.String(readonly=True),
            'petId': fields.String(attribute='pet_id'),
            'name': fields.String(),
            'dateAdministered': fields.String(attribute='date_administered'),
            'isScheduled': fields.Boolean(attribute='is_scheduled'),
            'createdAt': fields.String(attribute='created_at', readonly=True),
        })

        self.allergy_input_model = api.model('AllergyInput', {
            'petId': fields.String(required=True, description='Owning pet ID'),
            'name': fields.String(required=True, description='Allergen'),
            'reactions': fields.List(fields.String, required=True, description='Ordered, non-empty'),
            'severity': fields.String(required=True, enum=SEVERITY),
        })

        self.allergy_model = api.model('Allergy', {
            'id': fields.String(readonly=True),
            'petId': fields.String(attribute='pet_id'),
            'name': fields.String(),
            'reactions': fields.List(fields.String),
            'severity': fields.String(enum=SEVERITY),
            'createdAt': fields.String(attribute='created_at', readonly=True),
        })

        self.lab_input_model = api.model('LabInput', {
            'petId': fields.String(required=True, description='Owning pet ID'),
            'name': fields.String(required=True, description='Lab or medication name'),
            'dosage': fields.String(required=True),
            'instructions': fields.String(required=True),
        })

        self.lab_model = api.model('Lab', {
            'id': fields.String(readonly=True),
            'petId': fields.String(attribute='pet_id'),
            'name': fields.String(),
            'dosage': fields.String(),
            'instructions': fields.String(),
            'createdAt': fields.String(attribute='created_at', readonly=True),
        })

        self.record_models = {
            RecordType.VACCINES: self.vaccine_model,
            RecordType.ALLERGIES: self.allergy_model,
            RecordType.LABS: self.lab_model,
        }
        self.record_input_models = {
            RecordType.VACCINES: self.vaccine_input_model,
            RecordType.ALLERGIES: self.allergy_input_model,
            RecordType.LABS: self.lab_input_model,
        }

        # ----------------------------
        # Misc
        # ----------------------------
        self.message_model = api.model('Message', {
            'message': fields.String(description='Human readable outcome'),
        })
