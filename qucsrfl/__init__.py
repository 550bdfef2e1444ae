"""Reading Qucs microstrip schematics, netlists and data files into connected components."""

__version__ = "2.0.0"