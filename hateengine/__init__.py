"""Game engine resources: archives, navigation graphs, textures, UI coordinates, input codes and level maps."""

__version__ = "0.1.0"