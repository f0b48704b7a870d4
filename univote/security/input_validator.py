# univote/security/input_validator.py

import html
import re
from datetime import datetime

import bleach

from univote.clock import to_naive_utc
from univote.errors import ValidationError

# Input validation and sanitization for request payloads

# Ids are signed 64-bit integers in storage
MAX_ID = 2 ** 63 - 1


class InputValidator:
    def __init__(self):
        self.allowed_html_tags = ['b', 'i', 'em', 'strong', 'p', 'br']
        self.allowed_html_attributes = {}

        self.patterns = {
            'email': re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'),
            'registration_number': re.compile(r'^[A-Za-z0-9/_-]{2,50}$'),
            'color': re.compile(r'^#[0-9a-fA-F]{6}$'),
            'xss_script': re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL),
            'xss_event': re.compile(r'\bon\w+\s*=', re.IGNORECASE)
        }

    def sanitize_string(self, input_str, max_length=255):
        if not isinstance(input_str, str):
            raise ValidationError("Input must be a string")
        if len(input_str) > max_length:
            input_str = input_str[:max_length]

        sanitized = re.sub(self.patterns['xss_script'], '', input_str)
        sanitized = re.sub(self.patterns['xss_event'], '', sanitized)
        sanitized = bleach.clean(sanitized, tags=self.allowed_html_tags, attributes=self.allowed_html_attributes, strip=True)
        return sanitized.strip()

    def sanitize_plain(self, input_str, max_length=255):
        # Names and titles carry no markup at all
        if not isinstance(input_str, str):
            raise ValidationError("Input must be a string")
        cleaned = html.unescape(bleach.clean(input_str[:max_length], tags=[], attributes={}, strip=True))
        return cleaned.replace('<', '').replace('>', '').strip()

    def require_fields(self, data, fields, message):
        if not isinstance(data, dict):
            raise ValidationError(message)
        for field in fields:
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(message)
        return data

    def validate_email(self, email):
        return isinstance(email, str) and bool(self.patterns['email'].match(email))

    def validate_registration_number(self, registration_number):
        return isinstance(registration_number, str) and bool(
            self.patterns['registration_number'].match(registration_number)
        )

    def validate_color(self, color):
        return isinstance(color, str) and bool(self.patterns['color'].match(color))

    def parse_id(self, value, field="id"):
        if isinstance(value, bool):
            raise ValidationError(f"Invalid {field}")
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {field}")
        if parsed < 1 or parsed > MAX_ID:
            raise ValidationError(f"Invalid {field}")
        return parsed

    def parse_year(self, value):
        try:
            year = int(value)
        except (TypeError, ValueError):
            raise ValidationError("Year must be between 1 and 4")
        if year < 1 or year > 4:
            raise ValidationError("Year must be between 1 and 4")
        return year

    def parse_datetime(self, value):
        """Parse an ISO-8601 timestamp into naive UTC; naive input is taken as UTC."""
        if isinstance(value, datetime):
            return to_naive_utc(value)
        if not isinstance(value, str):
            raise ValidationError("Invalid date format. Please use ISO format.")
        text = value.strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError("Invalid date format. Please use ISO format.")
        return to_naive_utc(parsed)


validator = InputValidator()
