"""Layout template data model.

A template is an ordered list of named rectangular regions on a
standardized license image. Templates are immutable once loaded.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    """Half-open pixel rectangle ``[x_min, x_max) x [y_min, y_max)``."""

    x_min: int
    y_min: int
    x_max: int
    y_max: int

    @property
    def width(self) -> int:
        return self.x_max - self.x_min

    @property
    def height(self) -> int:
        return self.y_max - self.y_min

    def fits_within(self, width: int, height: int) -> bool:
        """Check whether the region is non-degenerate and inside an image.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            ``True`` when the region can be cropped from the image.
        """
        return not (
            self.x_min < 0
            or self.y_min < 0
            or self.width <= 0
            or self.height <= 0
            or self.x_min + self.width > width
            or self.y_min + self.height > height
        )


@dataclass(frozen=True)
class FieldDefinition:
    """A labeled area on a template."""

    name: str
    region: Region


@dataclass(frozen=True)
class Template:
    """Named layout of field regions for one jurisdiction."""

    identifier: str
    fields: tuple[FieldDefinition, ...]
    canvas_size: tuple[int, int] | None = None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]
