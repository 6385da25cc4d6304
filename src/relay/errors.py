class RequestError(Exception):
    """A client input error, raised before any call to Notion is made."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def missing_fields(*names: str) -> RequestError:
    """A 400 naming the required fields, e.g. "page_id and properties are required"."""
    if len(names) == 1:
        joined = names[0]
    elif len(names) == 2:
        joined = f"{names[0]} and {names[1]}"
    else:
        joined = ", ".join(names[:-1]) + f", and {names[-1]}"
    verb = "is" if len(names) == 1 else "are"
    return RequestError(400, f"{joined} {verb} required")
