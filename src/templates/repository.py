"""File-backed repository of license layout templates.

Templates are looked up by a normalized jurisdiction key and loaded from
Pascal-VOC style XML annotations or from YAML files.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

import yaml

from src.errors import MalformedTemplateError
from src.utils.logger import get_logger

from .models import FieldDefinition, Region, Template

logger = get_logger(__name__)

_SUFFIXES = (".xml", ".yaml", ".yml")
_COORD_KEYS = ("x_min", "y_min", "x_max", "y_max")
_VOC_COORD_TAGS = ("xmin", "ymin", "xmax", "ymax")


def normalize_identifier(name: str) -> str:
    """Turn a jurisdiction name into a template key.

    Args:
        name: Jurisdiction name such as ``"New York"``.

    Returns:
        Lower-cased key with all whitespace removed (``"newyork"``).
    """
    return re.sub(r"\s+", "", name).lower()


class TemplateRepository:
    """Looks up templates stored under a directory.

    For a key ``k`` the files ``States/k.xml``, ``k.xml``, ``States/k.yaml``
    and ``k.yaml`` are tried in that order.

    Args:
        directory: Root directory holding the template files.
    """

    def __init__(self, directory: Path = Path("configs/templates")) -> None:
        self.directory = Path(directory)

    def lookup(self, identifier: str) -> Template | None:
        """Load the template for an identifier.

        Args:
            identifier: Jurisdiction name or key; normalized before lookup.

        Returns:
            The template, or ``None`` when no file exists for the key.

        Raises:
            MalformedTemplateError: If a file exists but cannot be parsed.
        """
        key = normalize_identifier(identifier)
        path = self._find_file(key)
        if path is None:
            logger.warning("No template found for '%s'", key)
            return None

        logger.info("Loading template for '%s' from %s", key, path)
        if path.suffix == ".xml":
            template = self._load_xml(path, key)
        else:
            template = self._load_yaml(path, key)
        logger.info(
            "Template '%s' contains %d field definitions",
            key,
            len(template.fields),
        )
        return template

    def available(self) -> list[str]:
        """List identifiers for which a template file exists."""
        keys: set[str] = set()
        for folder in (self.directory / "States", self.directory):
            if not folder.is_dir():
                continue
            for path in folder.iterdir():
                if path.is_file() and path.suffix in _SUFFIXES:
                    keys.add(path.stem)
        return sorted(keys)

    def _find_file(self, key: str) -> Path | None:
        if not key:
            return None
        candidates = [
            self.directory / "States" / f"{key}.xml",
            self.directory / f"{key}.xml",
            self.directory / "States" / f"{key}.yaml",
            self.directory / f"{key}.yaml",
            self.directory / "States" / f"{key}.yml",
            self.directory / f"{key}.yml",
        ]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
            logger.debug("Template not at %s", candidate)
        return None

    def _load_xml(self, path: Path, key: str) -> Template:
        """Parse a Pascal-VOC annotation file into a template."""
        try:
            root = ET.parse(path).getroot()
        except (ET.ParseError, OSError) as exc:
            raise MalformedTemplateError(path, str(exc)) from exc
        if root.tag != "annotation":
            raise MalformedTemplateError(
                path, f"expected <annotation> root, got <{root.tag}>"
            )

        canvas_size = None
        size = root.find("size")
        if size is not None:
            try:
                canvas_size = (
                    int(size.findtext("width", "")),
                    int(size.findtext("height", "")),
                )
            except ValueError:
                logger.debug("Ignoring unreadable <size> in %s", path)

        fields: list[FieldDefinition] = []
        for index, obj in enumerate(root.findall("object")):
            name = (obj.findtext("name") or "").strip()
            box = obj.find("bndbox")
            if not name or box is None:
                logger.warning(
                    "Skipping object %d in %s: missing name or bndbox", index, path
                )
                continue
            try:
                coords = [int(box.findtext(tag, "")) for tag in _VOC_COORD_TAGS]
            except ValueError:
                logger.warning(
                    "Skipping field '%s' in %s: non-integer bndbox", name, path
                )
                continue
            fields.append(FieldDefinition(name=name, region=Region(*coords)))

        return Template(identifier=key, fields=tuple(fields), canvas_size=canvas_size)

    def _load_yaml(self, path: Path, key: str) -> Template:
        """Parse a YAML layout file into a template."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, UnicodeDecodeError, OSError) as exc:
            raise MalformedTemplateError(path, str(exc)) from exc
        if not isinstance(data, dict):
            raise MalformedTemplateError(path, "top level must be a mapping")

        raw_fields = data.get("fields") or []
        if not isinstance(raw_fields, list):
            raise MalformedTemplateError(path, "'fields' must be a list")

        fields: list[FieldDefinition] = []
        for index, entry in enumerate(raw_fields):
            field = self._yaml_field(entry)
            if field is None:
                logger.warning(
                    "Skipping field %d in %s: missing name or region", index, path
                )
                continue
            fields.append(field)

        canvas_size = None
        size = data.get("size")
        if isinstance(size, dict) and "width" in size and "height" in size:
            try:
                canvas_size = (int(size["width"]), int(size["height"]))
            except (TypeError, ValueError):
                logger.debug("Ignoring unreadable size in %s", path)

        return Template(
            identifier=str(data.get("identifier") or key),
            fields=tuple(fields),
            canvas_size=canvas_size,
        )

    @staticmethod
    def _yaml_field(entry: Any) -> FieldDefinition | None:
        if not isinstance(entry, dict):
            return None
        name = str(entry.get("name") or "").strip()
        region = entry.get("region")
        if not name or not isinstance(region, dict):
            return None
        try:
            coords = [int(region[k]) for k in _COORD_KEYS]
        except (KeyError, TypeError, ValueError):
            return None
        return FieldDefinition(name=name, region=Region(*coords))
