"""Error taxonomy for the extraction core."""


class NoValidOcrResult(ValueError):
    """Every OCR pass handed to the merger had confidence <= 0."""

    def __init__(self, pass_count: int = 0):
        self.pass_count = pass_count
        super().__init__(f"No valid OCR results to merge ({pass_count} passes supplied, all failed)")


class MalformedCandidateWarning(UserWarning):
    """
    A FieldCandidate carried a value of the wrong shape (e.g. a string where a list
    was expected). Never raised: the record builder logs it and substitutes the
    field's default.
    """

    def __init__(self, field_name: str, expected: str, got: str):
        self.field_name = field_name
        self.expected = expected
        self.got = got
        super().__init__(f"Malformed candidate for '{field_name}': expected {expected}, got {got}")
