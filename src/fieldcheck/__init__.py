"""Fieldcheck — field-level validation for values taken from HTTP requests.

Collects human-readable messages keyed by field name into one
``Validator``, which can be merged, nested, rendered, serialized to
JSON, and raised as a 400 error.

Basic usage::

    import fieldcheck

    v = fieldcheck.Validator()
    v.required("name", customer.name)
    v.email("email", customer.email)
    v.sub("address", None, customer.address.validate())
    if v.has_errors():
        print(v)

Rule lists::

    from fieldcheck.validation import validate, required, email
    result = validate(form, {"email": [required, email]})

File uploads (``pip install fieldcheck[forms]`` for multipart parsing)::

    form = await fieldcheck.parse_form_data(body, content_type)
    v.image_dimensions("avatar", form.files["avatar"],
                       max_dimension=fieldcheck.ImageDimension(512, 512))
"""

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_MESSAGES",
    "Address",
    "AddressError",
    "AddressList",
    "ConfigurationError",
    "ContractError",
    "FieldcheckError",
    "FormData",
    "ImageDimension",
    "Messages",
    "UploadFile",
    "ValidationResult",
    "Validator",
    "new",
    "parse_form_data",
    "validate",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import fieldcheck`` fast; Pillow and email-validator load
    only when the validation layer is first used.
    """
    if name in ("Validator", "ValidationResult", "ImageDimension", "new", "validate"):
        from fieldcheck import validation as _validation

        return getattr(_validation, name)

    if name in ("Messages", "DEFAULT_MESSAGES"):
        from fieldcheck import config as _config

        return getattr(_config, name)

    if name in ("Address", "AddressList"):
        from fieldcheck import address as _address

        return getattr(_address, name)

    if name in ("FieldcheckError", "ConfigurationError", "ContractError", "AddressError"):
        from fieldcheck import errors as _errors

        return getattr(_errors, name)

    if name in ("FormData", "UploadFile", "parse_form_data"):
        from fieldcheck.http import forms as _forms

        return getattr(_forms, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
