import config
from .radar_display import draw_radar


def render(screen, font, world, selected=None):
    screen.fill((0, 0, 0))
    draw_radar(screen, font, world, selected)


def font_measure(font):
    """Datablock measurer backed by the pygame font used to draw them."""
    def measure(text: str):
        lines = text.split("\n")
        width = max(font.size(line)[0] for line in lines)
        return float(width), float(len(lines) * config.LINE_H)
    return measure
