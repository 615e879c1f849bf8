# SPDX-License-Identifier: AGPL-3.0-only

"""
Input validation schemas using Marshmallow for API endpoints.
"""
from typing import Any, Dict

from marshmallow import Schema, fields, validate, ValidationError, EXCLUDE

from common.errors import InvalidInput


class _LenientSchema(Schema):
    """Ignore keys the front-end sends that an endpoint does not use."""

    class Meta:
        unknown = EXCLUDE


class ImageSchema(_LenientSchema):
    """One base64 encoded image or PDF."""
    base64 = fields.Str(
        required=True,
        validate=validate.Length(min=1),
        error_messages={
            'required': 'Please provide base64 image data',
            'invalid': 'Image data must be a base64 string'
        }
    )
    mimeType = fields.Str(
        required=False,
        allow_none=True,
        load_default=None,
        validate=validate.Length(max=100),
        error_messages={'invalid': 'mimeType must be a string'}
    )


class OcrSingleRequestSchema(ImageSchema):
    """Validation schema for single page OCR requests."""
    returnHtml = fields.Bool(required=False, load_default=False)


class OcrMultiRequestSchema(_LenientSchema):
    """Validation schema for multi-page OCR requests."""
    images = fields.List(
        fields.Nested(ImageSchema),
        required=True,
        validate=validate.Length(min=1, error='Please provide an array of images'),
        error_messages={
            'required': 'Please provide an array of images',
            'invalid': 'Please provide an array of images'
        }
    )


class ImageToTableRequestSchema(ImageSchema):
    """Validation schema for image to spreadsheet requests."""


class ImageToCsvRequestSchema(ImageSchema):
    """Validation schema for image to CSV requests."""


class WritingRequestSchema(_LenientSchema):
    """Validation schema for AI writing requests."""
    promptType = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=50),
        error_messages={
            'required': 'Please provide a prompt type',
            'invalid': 'Prompt type must be a string'
        }
    )
    text = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=20000),
        error_messages={
            'required': 'Please provide input text',
            'invalid': 'Input text must be a string'
        }
    )
    paragraphs = fields.Int(
        required=False,
        load_default=3,
        validate=validate.Range(min=1, max=20),
        error_messages={'invalid': 'Paragraphs must be a number'}
    )


class PdfPasswordSchema(_LenientSchema):
    """Validation schema for PDF protect/unlock form fields."""
    password = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=128, error='No password provided'),
        error_messages={'required': 'No password provided'}
    )


class PdfToWordSchema(_LenientSchema):
    """Validation schema for PDF to Word form fields."""
    pages = fields.Str(
        required=False,
        load_default="",
        validate=validate.Length(max=100),
        error_messages={'invalid': 'Page range must be a string'}
    )


def first_error_message(messages: Any) -> str:
    """Flatten marshmallow's nested error structure to its first message."""
    if isinstance(messages, dict):
        for value in messages.values():
            return first_error_message(value)
    if isinstance(messages, list) and messages:
        return first_error_message(messages[0])
    return str(messages) if messages else "Invalid request"


def load_request(schema: Schema, data: Any) -> Dict[str, Any]:
    """
    Validate request data with a schema.

    Raises:
        InvalidInput: With the first validation message
    """
    if data is None:
        data = {}
    try:
        return schema.load(data)
    except ValidationError as e:
        raise InvalidInput(first_error_message(e.messages))
