[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "crystalfft"
version = "0.1.0"
description = "Building blocks for FFT-based elasto-viscoplastic crystal plasticity simulations"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "crystal plasticity",
    "FFT",
    "micromechanics",
    "polycrystal",
    "von Mises",
    "VTK",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["crystalfft"]

[tool.pytest.ini_options]
addopts = "-ra"
