"""Errors that cross the extraction pipeline boundary."""


class InvalidImageError(ValueError):
    """
    The caller's payload is empty, not decodable, or not an image.
    No extraction stage can run, so this is surfaced as a rejected request.
    """
