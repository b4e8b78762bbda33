"""Design system - the theme configuration shared by master, layouts and slides.

Colors feed the theme's color scheme (``<a:clrScheme>``), fonts feed the font
scheme, and the point sizes drive the master's title and body text styles.
"""

from dataclasses import dataclass, fields

from pptxforge.schema.colors import normalize_hex


_COLOR_SLOTS = ("dk1", "lt1", "dk2", "lt2", "accent1", "accent2", "accent3",
                "accent4", "accent5", "accent6", "hlink", "fol_hlink")


@dataclass
class DesignSystem:
    """Theme palette and typography."""
    theme_name: str = "Office Theme"

    # Colors (RRGGBB)
    dk1: str = "000000"
    lt1: str = "FFFFFF"
    dk2: str = "44546A"
    lt2: str = "E7E6E6"
    accent1: str = "4472C4"
    accent2: str = "ED7D31"
    accent3: str = "A5A5A5"
    accent4: str = "FFC000"
    accent5: str = "5B9BD5"
    accent6: str = "70AD47"
    hlink: str = "0563C1"
    fol_hlink: str = "954F72"

    # Typography
    major_font: str = "Calibri Light"    # Headings
    minor_font: str = "Calibri"          # Body
    title_size_pt: float = 44.0
    body_size_pt: float = 28.0
    notes_size_pt: float = 12.0

    def __post_init__(self) -> None:
        for slot in _COLOR_SLOTS:
            setattr(self, slot, normalize_hex(getattr(self, slot)))

    def color_scheme(self) -> list[tuple[str, str]]:
        """(element name, hex) pairs in ``<a:clrScheme>`` order."""
        return [("folHlink" if s == "fol_hlink" else s, getattr(self, s))
                for s in _COLOR_SLOTS]

    def to_dict(self) -> dict:
        return {
            "theme_name": self.theme_name,
            "colors": {slot: f"#{getattr(self, slot)}" for slot in _COLOR_SLOTS},
            "typography": {
                "major_font": self.major_font,
                "minor_font": self.minor_font,
                "title_size_pt": self.title_size_pt,
                "body_size_pt": self.body_size_pt,
                "notes_size_pt": self.notes_size_pt,
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DesignSystem":
        defaults = {f.name: f.default for f in fields(cls)}
        colors = d.get("colors", {})
        typo = d.get("typography", {})
        kwargs = {slot: colors.get(slot, defaults[slot]) for slot in _COLOR_SLOTS}
        for key in ("major_font", "minor_font", "title_size_pt", "body_size_pt",
                    "notes_size_pt"):
            kwargs[key] = typo.get(key, defaults[key])
        return cls(theme_name=d.get("theme_name", defaults["theme_name"]), **kwargs)
