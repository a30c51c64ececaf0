"""
JSON API helpers.

Responses use one envelope::

    {"success": true,  "data": ...}
    {"success": false, "error": "message"}

Request bodies and query strings are validated with Flask-WTF forms.  Build
them with ``MyForm.from_json()`` (request body) or ``MyForm.from_args()``
(query string) and call ``validate_or_raise()``; a failed validation raises
ValidationFailed carrying the first field error, which the global error
handler turns into a 400.

CSRF for the API is enforced globally by CSRFProtect through the
``X-CSRFToken`` header, so the forms themselves carry no token field.
"""
from flask import jsonify, request
from flask_wtf import FlaskForm
from wtforms.validators import StopValidation
from werkzeug.datastructures import MultiDict
from services.exceptions import ValidationFailed


def json_response(data=None, status=200, **extra):
    payload = {'success': True, 'data': data}
    payload.update(extra)
    return jsonify(payload), status


def error_response(message, status=400):
    return jsonify({'success': False, 'error': message}), status


def first_error(errors):
    """First message from a WTForms ``errors`` mapping."""
    for field, messages in errors.items():
        if isinstance(messages, dict):
            return first_error(messages)
        if messages:
            message = messages[0]
            return message if isinstance(message, str) else f'Invalid {field}'
    return 'Invalid input'


def json_formdata():
    """
    The JSON body as form data.

    Nulls are dropped so optional fields stay empty, booleans are passed
    through (BooleanField treats ``False`` as unchecked) and every other
    scalar becomes a string, which is what WTForms field coercion expects.
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}

    formdata = MultiDict()
    for key, value in body.items():
        if value is None:
            continue
        if isinstance(value, bool):
            formdata.add(key, value)
        elif isinstance(value, (list, tuple)):
            for item in value:
                formdata.add(key, str(item))
        else:
            formdata.add(key, str(value))
    return formdata


class Omittable:
    """
    Stop validating a field the client left out of the request.

    Unlike ``Optional`` an empty or malformed value that *was* sent is still
    validated, so ``{"amount": ""}`` fails instead of reading as "no amount".
    """
    field_flags = {'optional': True}

    def __call__(self, form, field):
        if not field.raw_data:
            field.errors[:] = []
            raise StopValidation()


class ApiForm(FlaskForm):
    """Base form for JSON endpoints."""

    class Meta:
        csrf = False

    @classmethod
    def from_json(cls, **kwargs):
        return cls(formdata=json_formdata(), **kwargs)

    @classmethod
    def from_args(cls, **kwargs):
        return cls(formdata=request.args, **kwargs)

    def has(self, name):
        """True when the client sent *name* (even as an empty value)."""
        return bool(self[name].raw_data)

    def validate_or_raise(self):
        if not self.validate():
            raise ValidationFailed(first_error(self.errors))
        return self
