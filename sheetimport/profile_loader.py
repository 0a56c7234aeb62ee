"""
Import profile loader
=====================

Loads import-type profiles from YAML: the column schema, optional row
enrichment, and the keys that stay internal to the import.

Lookup order for a profile id: ``SHEETIMPORT_PROFILES_DIR`` (when set), then
the profiles bundled with the package. A path to a ``.yaml``/``.yml`` file is
loaded directly.
"""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from sheetimport.config import get_settings
from sheetimport.errors import ProfileNotFoundError
from sheetimport.ir import ColumnSchema, ColumnSpec
from sheetimport.logger import get_logger

logger = get_logger(__name__)

BUNDLED_PROFILES_DIR = Path(__file__).resolve().parent / "profiles"

_YAML_SUFFIXES = {".yaml", ".yml"}


class ImportProfile(BaseModel):
    """
    One import type.

    Attributes:
        profile_id: identifier used on the command line and in results
        title: human-readable name
        sheet_name: sheet title for generated templates and exports
        column_schema: declared columns
        enrich: ``"vessel"`` adds location, commodity group and record key
        internal_keys: parsed keys dropped from the upsert payload
    """

    model_config = ConfigDict(frozen=True)

    profile_id: str
    title: str = ""
    sheet_name: str = "Sheet1"
    column_schema: ColumnSchema
    enrich: Optional[Literal["vessel"]] = None
    internal_keys: List[str] = Field(default_factory=list)


def _ensure_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    return {}


def _ensure_str_list(value: Any) -> List[str]:
    """Keep non-blank strings only."""
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _search_dirs() -> List[Path]:
    dirs: List[Path] = []
    override = get_settings().PROFILES_DIR
    if override:
        dirs.append(Path(override).expanduser())
    dirs.append(BUNDLED_PROFILES_DIR)
    return dirs


def resolve_profile_path(profile: str) -> Path:
    """Turn a profile id or YAML path into an existing file path."""
    candidate = Path(profile).expanduser()
    if candidate.suffix.lower() in _YAML_SUFFIXES:
        if candidate.is_file():
            return candidate
        raise ProfileNotFoundError(f"profile not found: {candidate}")
    for directory in _search_dirs():
        for suffix in (".yaml", ".yml"):
            path = directory / f"{profile}{suffix}"
            if path.is_file():
                return path
    raise ProfileNotFoundError(
        f"profile not found: {profile!r} (searched {', '.join(str(d) for d in _search_dirs())})"
    )


def parse_profile(data: Dict[str, Any], default_id: str = "") -> ImportProfile:
    """Build an :class:`ImportProfile` from already-parsed YAML data."""
    data = _ensure_dict(data)
    columns = []
    for item in data.get("columns") or []:
        fields = {k: v for k, v in _ensure_dict(item).items() if v is not None}
        if "example" in fields:
            fields["example"] = str(fields["example"])
        columns.append(ColumnSpec(**fields))
    schema = ColumnSchema(columns=columns)

    internal_keys = _ensure_str_list(data.get("internal_keys"))
    unknown = [k for k in internal_keys if k not in schema.keys]
    if unknown:
        raise ValueError(f"internal_keys not declared as columns: {', '.join(unknown)}")

    enrich = data.get("enrich")
    return ImportProfile(
        profile_id=str(data.get("profile_id") or default_id),
        title=str(data.get("title") or ""),
        sheet_name=str(data.get("sheet_name") or "Sheet1"),
        column_schema=schema,
        enrich=enrich if enrich else None,
        internal_keys=internal_keys,
    )


def load_profile(profile: str) -> ImportProfile:
    """
    Load a profile by id (``"vessels"``) or by YAML file path.

    Raises:
        ProfileNotFoundError: no such profile
        ValueError: the YAML does not describe a valid column schema
    """
    path = resolve_profile_path(profile)
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    loaded = parse_profile(raw, default_id=path.stem)
    logger.debug("Loaded profile %s from %s (%d columns)", loaded.profile_id, path, len(loaded.column_schema.columns))
    return loaded


def list_profiles() -> List[str]:
    """Ids of every profile reachable through the search directories."""
    ids = set()
    for directory in _search_dirs():
        if not directory.is_dir():
            continue
        for path in directory.iterdir():
            if path.suffix.lower() in _YAML_SUFFIXES:
                ids.add(path.stem)
    return sorted(ids)
