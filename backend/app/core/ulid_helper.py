"""Primary keys for every table are 26-character ULID strings."""

import ulid


def generate_ulid() -> str:
    return str(ulid.ULID())
