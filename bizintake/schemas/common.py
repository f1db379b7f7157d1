from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_VALUE_ERROR_PREFIX = "Value error, "


class CamelModel(BaseModel):
    """Response model built from internal dataclasses, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def describe_errors(errors: list[dict]) -> tuple[str, list[dict]]:
    """
    Collapse pydantic error dicts into one human-readable message plus a
    per-field list: ("Validation error: City is required at \"city\"", [...]).
    """
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body",)]
        field = ".".join(loc)
        msg = err.get("msg", "Invalid value")
        if msg.startswith(_VALUE_ERROR_PREFIX):
            msg = msg[len(_VALUE_ERROR_PREFIX):]
        details.append({"field": field, "message": msg})

    parts = [
        f'{d["message"]} at "{d["field"]}"' if d["field"] else d["message"] for d in details
    ]
    return "Validation error: " + "; ".join(parts), details
