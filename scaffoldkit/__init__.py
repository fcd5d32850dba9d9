"""scaffoldkit -- scaffold projects and features from declarative templates."""

__version__ = "0.1.0"
