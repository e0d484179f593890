"""Parser for Rainbow Six Siege match replay files, with statistics and an upload server."""

__version__ = "0.1.0"