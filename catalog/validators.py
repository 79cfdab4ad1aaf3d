"""
Field validators for catalog identifiers and credentials.
"""
import re

from django.core.exceptions import ValidationError

# CC-XXX-YY-NNNNN: country, registrant, year, designation
ISRC_PATTERN = re.compile(r'^[A-Z]{2}-[A-Z0-9]{3}-\d{2}-\d{5}$')

VALID_PROS = ['ASCAP', 'BMI', 'SESAC', 'GMR', 'SOCAN', 'PRS', 'PPL']


def validate_isrc(value):
    if value and not ISRC_PATTERN.match(value):
        raise ValidationError(
            'ISRC code must be in format CC-XXX-YY-NNNNN (e.g., US-S1Z-99-00001)',
            code='INVALID_ISRC_FORMAT',
        )


def validate_pro_affiliation(value):
    if value and value.upper() not in VALID_PROS:
        raise ValidationError(
            f"PRO affiliation must be one of: {', '.join(VALID_PROS)}",
            code='INVALID_PRO',
        )
