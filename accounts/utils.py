import secrets
import string

SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"


def generate_password(length: int = 12) -> str:
    """Random password holding at least one lowercase, uppercase, digit and symbol."""
    pools = [string.ascii_lowercase, string.ascii_uppercase, string.digits, SYMBOLS]
    alphabet = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars += [secrets.choice(alphabet) for _ in range(max(length, len(pools)) - len(pools))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
