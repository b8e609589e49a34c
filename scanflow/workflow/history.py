def clean_file_name(raw: str, prefix: str | None) -> str:
    """Drop a leading `<prefix>-` that the user typed along with the new name."""
    if prefix and raw.startswith(prefix + "-"):
        return raw[len(prefix) + 1 :]
    return raw


def append_history(history: tuple[str, ...], name: str) -> tuple[str, ...]:
    """Return history with `name` appended, unless it repeats the last entry."""
    if history and history[-1] == name:
        return history
    return (*history, name)
