from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

import yaml

from estimate_rollup.core.errors import EstimateLoadError

logger = logging.getLogger(__name__)

# suffix -> (parse error code, parser, exceptions the parser raises on bad input)
_PARSERS: dict[str, tuple[str, Callable[[str], Any], tuple[type[Exception], ...]]] = {
    ".json": ("E_JSON_PARSE", json.loads, (json.JSONDecodeError,)),
    ".yaml": ("E_YAML_PARSE", yaml.safe_load, (yaml.YAMLError,)),
    ".yml": ("E_YAML_PARSE", yaml.safe_load, (yaml.YAMLError,)),
}


def load_estimates(path: str) -> dict[str, Any]:
    """Load an estimates document from a .json, .yaml or .yml file.

    The file is read as bytes and decoded as UTF-8 (a leading BOM is
    accepted). Returns {"estimates": <raw value>, "__file__": <path>}; any
    other top-level key, including derived root totals, is dropped. Values
    are not coerced; shape checking is left to the validator.

    Raises EstimateLoadError with one of E_FILE_NOT_FOUND,
    E_UNSUPPORTED_FORMAT, E_FILE_READ, E_FILE_ENCODING, E_JSON_PARSE,
    E_YAML_PARSE or E_INVALID_TOP_LEVEL.
    """

    p = Path(path)
    file = str(p)
    if not p.exists():
        raise EstimateLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file=file)

    parser = _PARSERS.get(p.suffix.lower())
    if parser is None:
        raise EstimateLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message=f"supported formats are {', '.join(_PARSERS)}",
            file=file,
        )
    parse_code, parse, parse_errors = parser

    try:
        raw = p.read_bytes()
    except OSError as e:
        raise EstimateLoadError(code="E_FILE_READ", message=str(e), file=file) from e

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise EstimateLoadError(
            code="E_FILE_ENCODING",
            message=f"estimates file must be UTF-8 encoded ({e.reason} at byte {e.start})",
            file=file,
        ) from e

    try:
        data = parse(text)
    except parse_errors as e:
        raise EstimateLoadError(code=parse_code, message=str(e), file=file) from e

    if not isinstance(data, dict):
        raise EstimateLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="estimates document must be a mapping with an `estimates` key",
            file=file,
        )

    logger.debug("loaded %d bytes of estimates from %s", len(raw), file)
    return {"estimates": data.get("estimates"), "__file__": file}
