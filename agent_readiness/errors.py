from __future__ import annotations


class ScoringInputError(ValueError):
    """Raised before any network activity when the input can't be scored."""


class InvalidUrl(ScoringInputError):
    pass


class NotAFullUrl(ScoringInputError):
    pass
