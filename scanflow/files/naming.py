import re
import unicodedata

_MAX_LENGTH = 200
_UNSAFE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_WHITESPACE = re.compile(r"\s+")
_REPEATED_SEPARATORS = re.compile(r"_{2,}")


def sanitize_file_name(name: str, fallback: str = "document") -> str:
    """Make a model-suggested name safe to use as a base file name.

    Strips accents, replaces path and shell-unsafe characters and whitespace
    with underscores, and caps the length.
    """
    normalized = unicodedata.normalize("NFKD", name)
    ascii_name = normalized.encode("ascii", "ignore").decode("ascii")
    safe = _UNSAFE.sub("_", ascii_name)
    safe = _WHITESPACE.sub("_", safe)
    safe = _REPEATED_SEPARATORS.sub("_", safe).strip("._- ")
    return safe[:_MAX_LENGTH] or fallback
