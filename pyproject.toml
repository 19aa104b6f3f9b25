[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eddygrid"
version = "0.1.0"
description = "Rank topology, halo exchange, grid parameters and topography input for horizontally decomposed atmospheric simulation grids"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "atmospheric",
    "large-eddy simulation",
    "grid",
    "domain decomposition",
    "halo exchange",
    "topography",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["eddygrid"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
