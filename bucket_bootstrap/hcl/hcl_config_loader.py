# (c) Nelen & Schuurmans

import logging
import re
from collections import Counter
from pathlib import Path

import hcl2
from lark import Token
from lark import Tree
from lark.exceptions import LarkError

from bucket_bootstrap.base.domain import BadRequest
from bucket_bootstrap.base.domain import BucketConfig
from bucket_bootstrap.base.domain import ConfigError
from bucket_bootstrap.base.domain import Json

DEFAULT_CONFIG_PATH = Path("backend.hcl")
USED_ATTRIBUTES = ("bucket", "region")

__all__ = ["DEFAULT_CONFIG_PATH", "load_bucket_config"]

logger = logging.getLogger(__name__)

TEMPLATE_SEQUENCE = re.compile(r"(?<![$%])[$%]\{")
ESCAPE_SEQUENCE = re.compile(r'\\(["\\nrt]|u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8})')
ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "r": "\r", "t": "\t"}


def _unescape(match: re.Match) -> str:
    seq = match.group(1)
    if seq in ESCAPES:
        return ESCAPES[seq]
    return chr(int(seq[1:], 16))


def _unquote(value):
    # recent python-hcl2 versions keep the quotes (and escapes) of string literals
    if isinstance(value, str) and len(value) >= 2 and value[0] == value[-1] == '"':
        return ESCAPE_SEQUENCE.sub(_unescape, value[1:-1])
    return value


def _top_level_attributes(tree: Tree) -> list[str]:
    body = next((t for t in tree.iter_subtrees_topdown() if t.data == "body"), None)
    names: list[str] = []
    if body is None:
        return names
    for child in body.children:
        if isinstance(child, Tree) and child.data == "attribute":
            name = next(child.children[0].scan_values(lambda v: isinstance(v, Token)))
            names.append(str(name))
    return names


def _read_hcl(path: Path) -> Json:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(str(path), "file not found")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(str(path), str(e))
    try:
        tree = hcl2.parses(text)
        duplicates = [
            k for (k, n) in Counter(_top_level_attributes(tree)).items() if n > 1
        ]
        if duplicates:
            raise ConfigError(
                str(path), f"attribute '{duplicates[0]}' is defined more than once"
            )
        return hcl2.transform(tree)
    except LarkError as e:
        raise ConfigError(str(path), f"cannot parse HCL: {e}")


def load_bucket_config(path: Path = DEFAULT_CONFIG_PATH) -> BucketConfig:
    """Read a backend.hcl style file into a BucketConfig.

    Only the top-level ``bucket`` and ``region`` attributes are used. Raises
    ConfigError when the file is missing or invalid, when an attribute is
    defined twice, when ``bucket`` is absent, or when ``bucket`` or ``region``
    contains a template (``${...}`` or ``%{...}``): there are no variables
    to evaluate it with.
    """
    path = Path(path)
    values = {k: _unquote(v) for (k, v) in _read_hcl(path).items()}
    if "bucket" not in values:
        raise ConfigError(str(path), "required attribute 'bucket' is missing")
    for name in USED_ATTRIBUTES:
        value = values.get(name)
        if isinstance(value, str) and TEMPLATE_SEQUENCE.search(value):
            raise ConfigError(
                str(path), f"attribute '{name}' contains a template: {value}"
            )
    try:
        config = BucketConfig.create(
            bucket=values["bucket"], region=values.get("region")
        )
    except BadRequest as e:
        raise ConfigError(str(path), str(e))
    logger.debug("Loaded %s: %r", path, config)
    return config
