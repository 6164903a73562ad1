"""Layout constants shared with the rendering surface."""

from dataclasses import dataclass

NODE_WIDTH = 180
NODE_HEIGHT = 320
# Default spacing used by auto-layout; compact mode halves it
BASE_SPACING = 30
PARTNER_SPACING = 1.5 * NODE_WIDTH + BASE_SPACING
# Nodes whose Y values round to the same multiple of this share a row
ROW_TOLERANCE = 5


@dataclass
class LayoutOptions:
    node_width: float = NODE_WIDTH
    node_height: float = NODE_HEIGHT
    base_spacing: float = BASE_SPACING
    partner_spacing: float = PARTNER_SPACING
    row_tolerance: float = ROW_TOLERANCE

    @classmethod
    def compact(cls) -> "LayoutOptions":
        """Options for the compact node style: half the gap between nodes."""
        spacing = BASE_SPACING / 2
        return cls(base_spacing=spacing, partner_spacing=1.5 * NODE_WIDTH + spacing)
