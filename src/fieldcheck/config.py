"""Message configuration.

Messages is a frozen dataclass holding the default wording of every check,
immutable after creation. Swap wording for localization by building a
new instance and handing it to the ``Validator``::

    from dataclasses import replace

    messages = replace(DEFAULT_MESSAGES, required="doit être renseigné")
    v = Validator(messages=messages)

Templates are plain text fragments meant to read well when joined with
commas (``"must be set, must be a valid email address"``). Parameterized
templates use ``str.format`` fields.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Messages:
    """Default message templates, one per check."""

    # Presence
    required: str = "must be set"

    # Format
    domain: str = "must be a valid domain"
    url: str = "must be a valid url"
    email: str = "must be a valid email address"
    ipv4: str = "must be a valid IPv4 address"
    hex_color: str = "must be a valid color code"
    phone: str = "must be a valid phone number"
    date: str = "must be a date as '{layout}'"

    # Length and range
    length_longer: str = "must be longer than {min} characters"
    length_shorter: str = "must be shorter than {max} characters"
    range_higher: str = "must be {min} or higher"
    range_lower: str = "must be {max} or lower"

    # Membership
    include: str = "must be one of '{choices}'"
    exclude: str = "cannot be '{value}'"

    # Type coercion
    integer: str = "must be a whole number"
    boolean: str = "must be a boolean"

    # Files
    file_mime_type: str = "must be a file of type '{types}'"
    file_size: str = "file size must be between '{min:.1f}'KB and '{max:.1f}'KB"
    file_max_size: str = "file size cannot be larger than '{max:.1f}'KB"
    file_min_size: str = "file size cannot be less than '{min:.1f}'KB"
    file_unreadable: str = "file could not be read"

    # Images
    not_an_image: str = "must be an image"
    image_format: str = "must be an image of '{formats}' format"
    image_dimension: str = (
        "image dimension (W x H) must be between "
        "'{min_width} x {min_height}' and '{max_width} x {max_height}' pixels"
    )
    image_min_dimension: str = (
        "image dimension (W x H) cannot be less than '{width} x {height}' pixels"
    )
    image_max_dimension: str = (
        "image dimension (W x H) cannot be more than '{width} x {height}' pixels"
    )
    image_no_dimensions: str = (
        "File is not an image. Only dimensions of image files can be determined."
    )
    image_unreadable: str = "image dimensions could not be read"


DEFAULT_MESSAGES = Messages()
