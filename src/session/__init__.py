from .state import CheatSession, LoadState, mame_dat_filename

__all__ = ["CheatSession", "LoadState", "mame_dat_filename"]
