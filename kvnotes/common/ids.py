import re
import secrets
import string

NOTE_ID_LENGTH = 8
NOTE_ID_ALPHABET = string.ascii_letters + string.digits

# anciens ids "0001" et nouveaux ids aléatoires: simples clés opaques
NOTE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,32}$")


def generate_note_id(length: int = NOTE_ID_LENGTH) -> str:
    return "".join(secrets.choice(NOTE_ID_ALPHABET) for _ in range(length))


def is_valid_note_id(value) -> bool:
    return isinstance(value, str) and NOTE_ID_PATTERN.fullmatch(value) is not None
