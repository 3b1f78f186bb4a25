"""
Load a plan or suite description from JSON.

A document with a top-level `steps` list is a Plan; anything else is
validated as a Suite.
"""
# @file purpose: Parse plan/suite description files.

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from pydantic import TypeAdapter, ValidationError

from .action import Plan, Suite
from .errors import DescriptionError

Description = Union[Plan, Suite]


def parse_description(data: Any) -> Description:
    model = Plan if isinstance(data, dict) and isinstance(data.get("steps"), list) else Suite
    try:
        return TypeAdapter(model).validate_python(data)
    except ValidationError as ve:
        raise DescriptionError(f"invalid {model.__name__.lower()} description: {ve}") from ve


def load_description(path: Path | str) -> Description:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise DescriptionError(f"cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DescriptionError(f"{path} is not valid JSON: {e}") from e
    return parse_description(data)
