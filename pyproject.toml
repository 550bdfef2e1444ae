[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "qucsrfl"
version = "2.0.0"
description = "Read Qucs microstrip schematics, netlists and data files into connected components"
requires-python = ">=3.10"
dependencies = []
keywords = ["qucs", "microstrip", "rf", "schematic", "netlist", "eda"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
qucsrfl = "qucsrfl.loader:main"

[tool.setuptools]
packages = ["qucsrfl"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
