import secrets, string
ALPHABET = string.ascii_uppercase + string.digits
PREFIX = "ENTRY_"

def generate_anonymous_id(length: int = 6) -> str:
    return PREFIX + "".join(secrets.choice(ALPHABET) for _ in range(length))
