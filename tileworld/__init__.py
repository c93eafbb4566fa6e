"""Tile world core: autotiling, lighting, render chunks, world editing and small UI helpers."""

__version__ = "0.1.0"

__all__ = [
    "autotile",
    "chunks",
    "cursor",
    "geometry",
    "lighting",
    "textutil",
    "tilerules",
    "world",
    "worlddata",
]