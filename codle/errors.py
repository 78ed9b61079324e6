"""
Error taxonomy shared by the engines, the stores and the routes.

- ConfigurationError -> server misconfigured (500)
- ValidationError    -> malformed input (400)
- PermissionDenied   -> player is not part of the match (403)
- NotFoundError      -> something inside a match is missing (404)
- ConflictError      -> valid input refused by the current game state (409)

A missing match itself is reported by the stores as None, like a missing game.
Placement failures in GridLink are not errors: the engine returns None/False.
"""


class ConfigurationError(RuntimeError):
    pass


class ValidationError(ValueError):
    pass


class PermissionDenied(Exception):
    pass


class NotFoundError(LookupError):
    pass


class ConflictError(Exception):
    pass
