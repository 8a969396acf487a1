import uuid


def generate_record_id() -> str:
    """Primary-key default for every table (36-char UUID4 string)."""
    return str(uuid.uuid4())
