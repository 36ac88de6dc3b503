"""Primary key generation for new records."""

import random
import uuid

from recordforge.metadata.loader import EntitySchema

PREFIXED_SUFFIX_LENGTH = 6
NUMERIC_KEY_DIGITS = 10
MAX_INTEGER_KEY = 2**31 - 1


def generate_primary_key(schema: EntitySchema) -> str:
    """Generate a fresh primary key value for a new record.

    "prefixed" keys are the entity abbreviation followed by six uppercase
    hex characters (DR3F09A1). "numeric" keys are a zero-padded ten digit
    number, or a plain positive number that fits a 32-bit column when the
    key field is an integer. Uniqueness is probabilistic; the database
    primary key constraint is the final authority.
    """
    if schema.key_format == "numeric":
        pk = schema.get_field(schema.primary_key or "")
        if pk is not None and pk.type == "integer":
            return str(random.randint(1, MAX_INTEGER_KEY))
        return str(random.randrange(10**NUMERIC_KEY_DIGITS)).zfill(NUMERIC_KEY_DIGITS)

    suffix = uuid.uuid4().hex[:PREFIXED_SUFFIX_LENGTH].upper()
    return f"{schema.abbreviation}{suffix}"
