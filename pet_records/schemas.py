user = {
    "type": "object",
    "required": ["id", "email", "firstName", "lastName", "createdAt"],
    "properties": {
        "id": {
            "type": "string"
        },
        "email": {
            "type": "string"
        },
        "firstName": {
            "type": "string"
        },
        "lastName": {
            "type": "string"
        },
        "createdAt": {
            "type": "string"
        }
    },
    "additionalProperties": False
}


pet = {
    "type": "object",
    "required": ["id", "userId", "name", "animalType", "breed", "dateOfBirth", "createdAt"],
    "properties": {
        "id": {
            "type": "string"
        },
        "userId": {
            "type": "string"
        },
        "name": {
            "type": "string"
        },
        "animalType": {
            "type": "string",
            "enum": ["dog", "cat", "bird"]
        },
        "breed": {
            "type": "string"
        },
        "dateOfBirth": {
            "type": "string"
        },
        "createdAt": {
            "type": "string"
        }
    },
    "additionalProperties": False
}


vaccine = {
    "type": "object",
    "required": ["id", "petId", "name", "dateAdministered", "isScheduled", "createdAt"],
    "properties": {
        "id": {
            "type": "string"
        },
        "petId": {
            "type": "string"
        },
        "name": {
            "type": "string"
        },
        "dateAdministered": {
            "type": "string"
        },
        "isScheduled": {
            "type": "boolean"
        },
        "createdAt": {
            "type": "string"
        }
    },
    "additionalProperties": False
}


allergy = {
    "type": "object",
    "required": ["id", "petId", "name", "reactions", "severity", "createdAt"],
    "properties": {
        "id": {
            "type": "string"
        },
        "petId": {
            "type": "string"
        },
        "name": {
            "type": "string"
        },
        "reactions": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string"}
        },
        "severity": {
            "type": "string",
            "enum": ["mild", "severe"]
        },
        "createdAt": {
            "type": "string"
        }
    },
    "additionalProperties": False
}


lab = {
    "type": "object",
    "required": ["id", "petId", "name", "dosage", "instructions", "createdAt"],
    "properties": {
        "id": {
            "type": "string"
        },
        "petId": {
            "type": "string"
        },
        "name": {
            "type": "string"
        },
        "dosage": {
            "type": "string"
        },
        "instructions": {
            "type": "string"
        },
        "createdAt": {
            "type": "string"
        }
    },
    "additionalProperties": False
}


health = {
    "type": "object",
    "required": ["status", "timestamp"],
    "properties": {
        "status": {
            "type": "string"
        },
        "timestamp": {
            "type": "string"
        }
    }
}

# Route name -> schema of one record under that route
records = {
    "vaccines": vaccine,
    "allergies": allergy,
    "labs": lab,
    "medications": lab,
}
