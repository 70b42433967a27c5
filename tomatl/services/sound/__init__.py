from .sound_player import QtSoundPlayer, SilentPlayer

__all__ = ["QtSoundPlayer", "SilentPlayer"]
