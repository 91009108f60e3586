"""
command_builder.py
Builds light.turn_on commands from the smoothed screen color.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class LightCommand:
    entity_id: str
    rgb_color: Tuple[int, int, int]
    brightness: int
    transition: float

    def service_data(self):
        return {
            'entity_id': self.entity_id,
            'rgb_color': [int(c) for c in self.rgb_color],
            'brightness': int(self.brightness),
            'transition': float(self.transition),
        }


class CommandBuilder:
    def __init__(self, config):
        self.config = config

    def build(self, color):
        rgb = tuple(int(c) for c in color)
        # Brightest channel doubles as the light's brightness
        brightness = max(rgb)
        return LightCommand(
            entity_id=self.config.light_entity_name,
            rgb_color=rgb,
            brightness=brightness,
            transition=self.config.transition,
        )
