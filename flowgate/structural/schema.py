#flowgate/structural/schema.py
from jsonschema import Draft7Validator

REQUIRED_TOP_LEVEL_FIELDS = ("name", "nodes", "connections")

REQUIRED_NODE_FIELDS = ("id", "name", "type", "typeVersion", "position", "parameters")

# n8n exports positions as a [x, y] pair of numbers
POSITION_SCHEMA = {
    "type": "array",
    "items": {"type": "number"},
    "minItems": 2,
    "maxItems": 2,
}

# Shape of a connections map: source -> port -> [ [ {node, type, index}, ... ], ... ]
CONNECTIONS_SCHEMA = {
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "additionalProperties": {
            "type": "array",
            "items": {
                "anyOf": [
                    {"type": "array", "items": {"$ref": "#/definitions/hop"}},
                    {"$ref": "#/definitions/hop"},
                    {"type": "null"},
                ]
            },
        },
    },
    "definitions": {
        "hop": {
            "type": "object",
            "required": ["node"],
            "properties": {
                "node": {"type": "string"},
                "type": {"type": "string"},
                "index": {"type": "integer", "minimum": 0},
            },
            "additionalProperties": True,
        }
    },
}

POSITION_VALIDATOR = Draft7Validator(POSITION_SCHEMA)
CONNECTIONS_VALIDATOR = Draft7Validator(CONNECTIONS_SCHEMA)
