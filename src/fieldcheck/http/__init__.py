"""Request-side helpers: parsed form data and uploaded files."""

from fieldcheck.http.forms import FormData, UploadFile, parse_form_data

__all__ = ["FormData", "UploadFile", "parse_form_data"]
