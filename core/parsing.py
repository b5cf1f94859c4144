"""Request body helpers shared by the blueprints."""
from core.imports import datetime
from core.errors import ValidationFailed


def get_json_body(request):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return data


def require_fields(data, *fields):
    missing = [field for field in fields if data.get(field) in (None, "")]
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")


def parse_int(value, field, minimum=None):
    if isinstance(value, bool):
        raise ValidationFailed(f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field} must be an integer")
    if isinstance(value, float) and value != number:
        raise ValidationFailed(f"{field} must be an integer")
    if minimum is not None and number < minimum:
        raise ValidationFailed(f"{field} must be at least {minimum}")
    return number


def parse_optional_int(value, field, minimum=None):
    if value is None or value == "":
        return None
    return parse_int(value, field, minimum)


def parse_datetime(value, field):
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        raise ValidationFailed(f"{field} must be an ISO 8601 date")
    try:
        # accept a trailing Z from JavaScript clients
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationFailed(f"{field} must be an ISO 8601 date")
    # stored timestamps are naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - parsed.utcoffset()
    return parsed


def parse_bool_arg(value, field):
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValidationFailed(f"{field} must be true or false")


def parse_float_arg(value, field):
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field} must be a number")
